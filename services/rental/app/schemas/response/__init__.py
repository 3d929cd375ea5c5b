from services.rental.app.schemas.response.AvailabilityResponse import AvailabilityResponse
from services.rental.app.schemas.response.RentalResponse import RentalResponse

__all__ = [
    "AvailabilityResponse",
    "RentalResponse",
]
