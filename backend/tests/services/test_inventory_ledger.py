"""
Tests for hotelops/services/inventory_ledger.py
Covers: reserve, release, adjust, recalculate, available_room_numbers,
        mark_room_occupied, is_room_held
"""
import pytest

from hotelops.models.ontology import RoomType, Room
from hotelops.models.schemas import CustomerCreate
from hotelops.services.checkin_service import CheckInService
from hotelops.services.checkout_service import CheckOutService
from hotelops.services.errors import NotFoundError, RoomUnavailableError, ValidationError
from hotelops.services.identifiers import new_identifier
from hotelops.services.inventory_ledger import InventoryLedger


# ── helpers ──────────────────────────────────────────────────────────

def _noop(event):
    pass


def _check_in(db, hotel, room_type, room_number, name="John"):
    return CheckInService(db, _noop).check_in(hotel.id, CustomerCreate(
        name=name, phone="+11234567890",
        room_type_id=room_type.id, room_number=room_number,
    ))


def _room(db, hotel, room_type, number):
    room = Room(
        hotel_id=hotel.id, room_number=number,
        room_type_id=room_type.id, room_type_name=room_type.name,
    )
    db.add(room)
    db.commit()
    return room


# ── tests ────────────────────────────────────────────────────────────

class TestDefaultSetup:

    def test_four_room_types_fully_available(self, db_session, hotel):
        room_types = db_session.query(RoomType).filter(RoomType.hotel_id == hotel.id).all()
        assert len(room_types) == 4
        for rt in room_types:
            assert rt.total_rooms == 5
            assert rt.available_rooms == 5
            assert len(rt.room_numbers) == 5
        assert hotel.total_rooms == 20


class TestReserve:

    def test_decrements(self, db_session, standard_type):
        InventoryLedger(db_session).reserve(standard_type.id)
        db_session.commit()
        db_session.refresh(standard_type)
        assert standard_type.available_rooms == 4

    def test_full_room_type_rejected(self, db_session, standard_type):
        standard_type.available_rooms = 0
        db_session.commit()
        with pytest.raises(RoomUnavailableError):
            InventoryLedger(db_session).reserve(standard_type.id)
        db_session.refresh(standard_type)
        assert standard_type.available_rooms == 0

    def test_unknown_room_type(self, db_session, hotel):
        with pytest.raises(NotFoundError):
            InventoryLedger(db_session).reserve(new_identifier())


class TestRelease:

    def test_increments(self, db_session, standard_type):
        standard_type.available_rooms = 3
        db_session.commit()
        InventoryLedger(db_session).release(standard_type.id)
        db_session.commit()
        db_session.refresh(standard_type)
        assert standard_type.available_rooms == 4

    def test_at_capacity_is_not_an_error(self, db_session, standard_type):
        InventoryLedger(db_session).release(standard_type.id)
        db_session.commit()
        db_session.refresh(standard_type)
        assert standard_type.available_rooms == 5

    def test_unknown_room_type(self, db_session, hotel):
        with pytest.raises(NotFoundError):
            InventoryLedger(db_session).release(new_identifier())


class TestAdjust:

    def test_negative_delta(self, db_session, standard_type):
        InventoryLedger(db_session).adjust(standard_type.id, -2)
        db_session.commit()
        db_session.refresh(standard_type)
        assert standard_type.available_rooms == 3

    def test_out_of_bounds(self, db_session, standard_type):
        ledger = InventoryLedger(db_session)
        with pytest.raises(ValidationError):
            ledger.adjust(standard_type.id, 1)
        with pytest.raises(ValidationError):
            ledger.adjust(standard_type.id, -6)

    def test_zero_delta_is_noop(self, db_session, standard_type):
        InventoryLedger(db_session).adjust(standard_type.id, 0)
        assert standard_type.available_rooms == 5


class TestRecalculate:

    def test_repairs_drift(self, db_session, hotel, standard_type):
        """可用数被改坏后重算恢复为真实值"""
        _check_in(db_session, hotel, standard_type, "1")
        _check_in(db_session, hotel, standard_type, "2", name="Jane")
        standard_type.available_rooms = 99
        db_session.commit()

        summary = InventoryLedger(db_session).recalculate(hotel.id)

        db_session.refresh(standard_type)
        assert standard_type.available_rooms == 3
        assert summary[standard_type.id] == 3
        assert len(summary) == 4

    def test_matches_active_customers(self, db_session, hotel, standard_type, deluxe_type):
        _check_in(db_session, hotel, standard_type, "1")
        customer = _check_in(db_session, hotel, deluxe_type, "6", name="Jane")
        CheckOutService(db_session, _noop).check_out(hotel.id, customer.id)

        InventoryLedger(db_session).recalculate(hotel.id)

        for rt in db_session.query(RoomType).filter(RoomType.hotel_id == hotel.id).all():
            db_session.refresh(rt)
        assert standard_type.available_rooms == 4
        assert deluxe_type.available_rooms == 5

    def test_resyncs_room_occupancy(self, db_session, hotel, standard_type):
        room1 = _room(db_session, hotel, standard_type, "1")
        room2 = _room(db_session, hotel, standard_type, "2")
        _check_in(db_session, hotel, standard_type, "1")
        room1.is_occupied = False
        room2.is_occupied = True
        db_session.commit()

        InventoryLedger(db_session).recalculate(hotel.id)

        db_session.refresh(room1)
        db_session.refresh(room2)
        assert room1.is_occupied is True
        assert room2.is_occupied is False

    def test_check_in_out_round_trip(self, db_session, hotel, standard_type):
        before = standard_type.available_rooms
        customer = _check_in(db_session, hotel, standard_type, "3")
        CheckOutService(db_session, _noop).check_out(hotel.id, customer.id)
        InventoryLedger(db_session).recalculate(hotel.id)
        db_session.refresh(standard_type)
        assert standard_type.available_rooms == before

    def test_other_hotel_untouched(self, db_session, hotel, other_hotel):
        other_types = db_session.query(RoomType).filter(RoomType.hotel_id == other_hotel.id).all()
        other_types[0].available_rooms = 1
        db_session.commit()

        InventoryLedger(db_session).recalculate(hotel.id)

        db_session.refresh(other_types[0])
        assert other_types[0].available_rooms == 1


class TestAvailableRoomNumbers:

    def test_excludes_held_rooms(self, db_session, hotel, standard_type):
        _check_in(db_session, hotel, standard_type, "1")
        available = InventoryLedger(db_session).available_room_numbers(hotel.id)
        assert available[standard_type.id] == ["2", "3", "4", "5"]

    def test_subset_of_room_numbers(self, db_session, hotel, standard_type, deluxe_type):
        _check_in(db_session, hotel, deluxe_type, "7")
        available = InventoryLedger(db_session).available_room_numbers(hotel.id)
        assert len(available) == 4
        for rt in (standard_type, deluxe_type):
            assert set(available[rt.id]) <= set(rt.room_numbers)
        assert "7" not in available[deluxe_type.id]

    def test_released_room_reappears(self, db_session, hotel, standard_type):
        customer = _check_in(db_session, hotel, standard_type, "1")
        CheckOutService(db_session, _noop).check_out(hotel.id, customer.id)
        available = InventoryLedger(db_session).available_room_numbers(hotel.id)
        assert available[standard_type.id][0] == "1"


class TestRoomOccupancy:

    def test_mark_room_occupied(self, db_session, hotel, standard_type):
        room = _room(db_session, hotel, standard_type, "4")
        ledger = InventoryLedger(db_session)
        ledger.mark_room_occupied(hotel.id, "4", True)
        db_session.commit()
        db_session.refresh(room)
        assert room.is_occupied is True

    def test_missing_room_record_ignored(self, db_session, hotel):
        InventoryLedger(db_session).mark_room_occupied(hotel.id, "404", True)

    def test_is_room_held(self, db_session, hotel, standard_type):
        customer = _check_in(db_session, hotel, standard_type, "5")
        ledger = InventoryLedger(db_session)
        assert ledger.is_room_held(hotel.id, "5") is True
        assert ledger.is_room_held(hotel.id, "5", exclude_customer_id=customer.id) is False
        assert ledger.is_room_held(hotel.id, "4") is False
