"""Worker ID generation using coolnames for unique, memorable identifiers."""

from coolname import generate_slug


def generate_worker_id(prefix: str = "") -> str:
    """Generate a unique, memorable worker ID such as "mm-score-brave-golden-tiger".

    Args:
        prefix: Optional prefix to prepend to the generated ID
    """
    slug = generate_slug(3)
    return f"{prefix}-{slug}" if prefix else slug
