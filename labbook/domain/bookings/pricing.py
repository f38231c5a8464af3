"""Booking price calculation"""

# Flat charge for drawing the sample at the patient's address, whole rupees
HOME_COLLECTION_CHARGE = 100

SAMPLE_TYPES = ("home", "lab")


def collection_charge(sample_type: str) -> int:
    return HOME_COLLECTION_CHARGE if sample_type == "home" else 0


def compute_total(test_price: int, sample_type: str) -> int:
    """
    Total charge for a booking.

    Args:
        test_price: Listed cost of the test, whole currency units (>= 0)
        sample_type: "home" or "lab"

    Returns:
        test_price plus the home collection charge when sample_type is "home"
    """
    if test_price < 0:
        raise ValueError("Test price cannot be negative")
    if sample_type not in SAMPLE_TYPES:
        raise ValueError(f"Unknown sample type: {sample_type}")

    return test_price + collection_charge(sample_type)
