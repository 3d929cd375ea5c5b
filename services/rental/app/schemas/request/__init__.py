from .RentalCreateSchema import RentalCreateSchema

__all__ = [
    "RentalCreateSchema",
]
