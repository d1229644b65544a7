"""
Tests for hotel_service.py / room_type_service.py / hotel_admin_service.py
"""
from datetime import UTC
from decimal import Decimal

import pytest

from hotelops.models.ontology import HotelAdmin, RoomType, Room, RoomCategory, RoomKind
from hotelops.models.schemas import (
    HotelCreate, HotelUpdate, RegisterRequest, RoomTypeCreate, RoomTypeUpdate, CustomerCreate
)
from hotelops.services.checkin_service import CheckInService
from hotelops.services.errors import NotFoundError, ValidationError
from hotelops.services.hotel_admin_service import HotelAdminService
from hotelops.services.hotel_service import HotelService, resolve_timezone, to_hotel_local
from hotelops.services.room_qr_service import RoomQRService
from hotelops.services.room_type_service import RoomTypeService
from hotelops.security.auth import verify_password, get_password_hash


def _noop(event):
    pass


def _owner(db, username):
    owner = HotelAdmin(
        username=username, password_hash=get_password_hash("123456"),
        hotel_name="Lost Inn", email=f"{username}@hotelmail.com"
    )
    db.add(owner)
    db.commit()
    return owner


def _room_type(name="Penthouse", total=2, numbers=None):
    return RoomTypeCreate(
        name=name, category=RoomCategory.SUITE, type=RoomKind.PRESIDENTIAL_SUITE,
        price=Decimal("9900"), total_rooms=total, room_numbers=numbers,
        amenities=["Terrace"]
    )


class TestHotelService:

    def test_default_room_types_seeded(self, db_session, hotel):
        numbers = {
            rt.name: rt.room_numbers
            for rt in RoomTypeService(db_session).get_room_types(hotel.id)
        }
        assert set(numbers) == {"Standard Room", "Deluxe Room", "Suite", "Family Room"}
        assert numbers["Standard Room"] == ["1", "2", "3", "4", "5"]
        assert numbers["Family Room"] == ["16", "17", "18", "19", "20"]
        assert hotel.total_rooms == 20

    def test_one_hotel_per_admin(self, db_session, admin, hotel):
        with pytest.raises(ValidationError):
            HotelService(db_session).create_hotel(admin, HotelCreate(name="Second"))

    def test_unknown_timezone_rejected(self, db_session):
        owner = _owner(db_session, "admin3")
        with pytest.raises(ValidationError):
            HotelService(db_session).create_hotel(owner, HotelCreate(name="Lost", timezone="Mars/Olympus"))

    def test_update_profile(self, db_session, hotel):
        updated = HotelService(db_session).update_hotel(
            hotel.id, hotel.owner_id, HotelUpdate(city="Pune", star_rating=4, timezone="Asia/Kolkata")
        )
        assert updated.city == "Pune"
        assert updated.star_rating == 4
        assert updated.name == "Sunrise Inn"
        assert updated.timezone == "Asia/Kolkata"

    def test_update_by_other_owner(self, db_session, hotel, other_hotel):
        with pytest.raises(NotFoundError):
            HotelService(db_session).update_hotel(hotel.id, other_hotel.owner_id, HotelUpdate(city="Goa"))

    def test_timezone_helpers(self):
        assert resolve_timezone("UTC") is UTC
        assert resolve_timezone(None) is not None
        with pytest.raises(ValidationError):
            resolve_timezone("Nowhere/City")
        assert to_hotel_local(None, None).tzinfo is None


class TestRoomTypeService:

    def test_create_room_type(self, db_session, hotel):
        room_type = RoomTypeService(db_session).create_room_type(hotel.id, _room_type(numbers=["501", "502"]))
        assert room_type.available_rooms == 2
        assert room_type.room_numbers == ["501", "502"]
        db_session.refresh(hotel)
        assert hotel.total_rooms == 22

    def test_create_without_numbers(self, db_session, hotel):
        room_type = RoomTypeService(db_session).create_room_type(hotel.id, _room_type())
        assert room_type.room_numbers == []

    @pytest.mark.parametrize("numbers", [
        ["501"],             # 数量不一致
        ["501", "501"],      # 重复
        ["501", "1"],        # 已属于 Standard Room
    ])
    def test_invalid_room_numbers(self, db_session, hotel, numbers):
        with pytest.raises(ValidationError):
            RoomTypeService(db_session).create_room_type(hotel.id, _room_type(numbers=numbers))

    def test_update_with_delta(self, db_session, hotel, standard_type):
        room_type = RoomTypeService(db_session).update_room_type(
            standard_type.id, hotel.id, RoomTypeUpdate(price=Decimal("2700"), available_rooms_delta=-1)
        )
        assert room_type.price == Decimal("2700")
        assert room_type.available_rooms == 4

    def test_update_delta_out_of_range(self, db_session, hotel, standard_type):
        with pytest.raises(ValidationError):
            RoomTypeService(db_session).update_room_type(
                standard_type.id, hotel.id, RoomTypeUpdate(available_rooms_delta=1)
            )

    def test_rejected_delta_discards_edits(self, db_session, hotel, standard_type):
        """调整越界时，同一请求中的资料修改不会被之后的提交带入"""
        description = standard_type.description
        with pytest.raises(ValidationError):
            RoomTypeService(db_session).update_room_type(
                standard_type.id, hotel.id,
                RoomTypeUpdate(description="Renovated", price=Decimal("1"), available_rooms_delta=1)
            )

        db_session.commit()
        db_session.refresh(standard_type)
        assert standard_type.description == description
        assert standard_type.price != Decimal("1")
        assert standard_type.available_rooms == 5

    def test_delete_room_type(self, db_session, hotel, standard_type):
        RoomQRService(db_session).provision_room(hotel.id, "1", standard_type.id)
        RoomTypeService(db_session).delete_room_type(standard_type.id, hotel.id)

        assert db_session.query(RoomType).filter(RoomType.hotel_id == hotel.id).count() == 3
        assert db_session.query(Room).filter(Room.hotel_id == hotel.id).count() == 0
        db_session.refresh(hotel)
        assert hotel.total_rooms == 15

    def test_delete_with_active_guest(self, db_session, hotel, standard_type):
        CheckInService(db_session, _noop).check_in(hotel.id, CustomerCreate(
            name="John", phone="+11234567890", room_type_id=standard_type.id, room_number="1"
        ))
        with pytest.raises(ValidationError):
            RoomTypeService(db_session).delete_room_type(standard_type.id, hotel.id)

    def test_other_hotel_room_type(self, db_session, hotel, other_hotel, standard_type):
        with pytest.raises(NotFoundError):
            RoomTypeService(db_session).get_room_type(standard_type.id, other_hotel.id)


class TestHotelAdminService:

    def _register(self, db, username="frontdesk", email="Desk@HotelMail.com"):
        return HotelAdminService(db).register(RegisterRequest(
            username=username, password="secret123", hotel_name="Lakeview", email=email
        ))

    def test_register(self, db_session):
        admin = self._register(db_session)
        assert admin.email == "desk@hotelmail.com"
        assert verify_password("secret123", admin.password_hash)

    def test_duplicate_username(self, db_session):
        self._register(db_session)
        with pytest.raises(ValidationError):
            self._register(db_session, email="other@hotelmail.com")

    def test_duplicate_email(self, db_session):
        self._register(db_session)
        with pytest.raises(ValidationError):
            self._register(db_session, username="someone", email="desk@hotelmail.com")

    def test_authenticate(self, db_session):
        self._register(db_session)
        service = HotelAdminService(db_session)
        result = service.authenticate("frontdesk", "secret123")
        assert result["token_type"] == "bearer"
        assert result["access_token"]
        assert service.authenticate("frontdesk", "wrong") is None
        assert service.authenticate("nobody", "secret123") is None

    def test_inactive_account(self, db_session):
        admin = self._register(db_session)
        admin.is_active = False
        db_session.commit()
        with pytest.raises(ValidationError):
            HotelAdminService(db_session).authenticate("frontdesk", "secret123")
