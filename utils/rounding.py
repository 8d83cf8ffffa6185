def percentage(part, whole):
    """Whole-number percentage of ``part`` in ``whole``, halves rounded up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)
