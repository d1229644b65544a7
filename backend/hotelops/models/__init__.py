# Ontology Models
from hotelops.models.ontology import (
    HotelAdmin, Hotel, RoomType, Room, Customer, ServiceRequest, StaffAssignment
)

__all__ = [
    'HotelAdmin', 'Hotel', 'RoomType', 'Room', 'Customer',
    'ServiceRequest', 'StaffAssignment'
]
