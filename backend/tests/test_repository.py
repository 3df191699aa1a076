"""Tests for the booking repository: creation rules and guarded updates."""
import pytest

from sqlalchemy import event

from rentstays.errors import ConflictError, NotFoundError, ValidationError
from rentstays.models.booking import Booking, BookingStatus
from rentstays.models.property import PropertyStatus
from rentstays.services import booking_repository, catalog, lifecycle
from tests.conftest import (
    APPLICANT_ID,
    OWNER_ID,
    STRANGER_ID,
    booking_fields,
    make_booking,
    make_property,
    new_id,
)


class TestCreate:
    def test_create_then_get_round_trip(self, db):
        prop = make_property(db)
        fields = booking_fields()
        created = booking_repository.create(db, property_id=prop.id, applicant_id=APPLICANT_ID, **fields)

        fetched = booking_repository.get_by_id(db, created.id)
        assert fetched.id == created.id
        assert fetched.status == BookingStatus.under_review
        assert fetched.property_id == prop.id
        assert fetched.applicant_id == APPLICANT_ID
        for name, value in fields.items():
            assert getattr(fetched, name) == value
        assert fetched.admin_notes is None
        assert fetched.contract_url is None
        assert fetched.version == 1
        assert fetched.created_at == fetched.updated_at

    def test_unknown_property(self, db):
        with pytest.raises(NotFoundError):
            booking_repository.create(db, property_id=new_id(), applicant_id=APPLICANT_ID, **booking_fields())

    @pytest.mark.parametrize("status", [PropertyStatus.occupied, PropertyStatus.maintenance, PropertyStatus.reserved])
    def test_unavailable_property(self, db, status):
        prop = make_property(db, status=status)
        with pytest.raises(NotFoundError):
            make_booking(db, prop)

    @pytest.mark.parametrize(
        "field", ["duration_description", "reason_of_stay", "university_name", "current_address"],
    )
    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_required_field(self, db, field, blank):
        prop = make_property(db)
        with pytest.raises(ValidationError):
            make_booking(db, prop, **{field: blank})
        assert booking_repository.list_by_applicant(db, APPLICANT_ID) == []

    def test_blank_applicant(self, db):
        prop = make_property(db)
        with pytest.raises(ValidationError):
            make_booking(db, prop, applicant_id="  ")


class TestSingleActiveBooking:
    def test_duplicate_active_request_conflicts(self, db):
        prop = make_property(db)
        make_booking(db, prop)
        with pytest.raises(ConflictError):
            make_booking(db, prop)

    def test_other_applicant_may_apply(self, db):
        prop = make_property(db)
        make_booking(db, prop)
        other = make_booking(db, prop, applicant_id=STRANGER_ID)
        assert other.status == BookingStatus.under_review

    def test_reapply_after_rejection(self, db):
        prop = make_property(db)
        first = make_booking(db, prop)
        lifecycle.transition(db, first.id, OWNER_ID, BookingStatus.rejected)

        second = make_booking(db, prop)
        assert second.id != first.id

    def test_concurrent_create_loses_to_unique_index(self, db, session_factory):
        """A second session commits the same request between our check and our insert."""
        prop = make_property(db)
        prop_id = prop.id
        fired = []

        def _interleave(state):
            if fired or not state.is_select or not any(m.class_ is Booking for m in state.all_mappers):
                return None
            fired.append(True)
            frozen = state.invoke_statement().freeze()
            other = session_factory()
            try:
                booking_repository.create(
                    other, property_id=prop_id, applicant_id=APPLICANT_ID, **booking_fields()
                )
            finally:
                other.close()
            return frozen()

        event.listen(db, "do_orm_execute", _interleave)
        try:
            with pytest.raises(ConflictError):
                make_booking(db, prop)
        finally:
            event.remove(db, "do_orm_execute", _interleave)

        assert fired
        assert len(booking_repository.list_by_applicant(db, APPLICANT_ID)) == 1

    def test_unique_index_ignores_closed_requests(self, db):
        prop = make_property(db)
        first = make_booking(db, prop)
        lifecycle.transition(db, first.id, OWNER_ID, BookingStatus.approved)
        lifecycle.transition(db, first.id, OWNER_ID, BookingStatus.confirmed)
        second = make_booking(db, prop)
        assert second.status == BookingStatus.under_review


class TestListing:
    def test_list_by_applicant_newest_first(self, db):
        first = make_booking(db, make_property(db, title="A"))
        second = make_booking(db, make_property(db, title="B"))
        make_booking(db, make_property(db, title="C"), applicant_id=STRANGER_ID)

        listed = booking_repository.list_by_applicant(db, APPLICANT_ID)
        assert [b.id for b in listed] == [second.id, first.id]

    def test_list_by_owner_properties(self, db):
        mine = make_property(db, title="Mine")
        theirs = make_property(db, owner_id=STRANGER_ID, title="Theirs")
        b1 = make_booking(db, mine)
        make_booking(db, theirs)
        b3 = make_booking(db, mine, applicant_id=STRANGER_ID)

        listed = booking_repository.list_by_owner_properties(db, OWNER_ID)
        assert [b.id for b in listed] == [b3.id, b1.id]

    def test_owner_without_properties(self, db):
        assert booking_repository.list_by_owner_properties(db, new_id()) == []

    def test_get_missing(self, db):
        with pytest.raises(NotFoundError):
            booking_repository.get_by_id(db, new_id())


class TestUpdate:
    def test_update_bumps_version_and_timestamp(self, db):
        booking = make_booking(db, make_property(db))
        created_at, updated_at = booking.created_at, booking.updated_at

        result = booking_repository.update(db, booking.id, {"contract_url": "https://docs.example.com/lease.pdf"})
        assert result.contract_url == "https://docs.example.com/lease.pdf"
        assert result.version == 2
        assert result.updated_at > updated_at
        assert result.created_at == created_at

    def test_update_does_not_check_transitions(self, db):
        booking = make_booking(db, make_property(db))
        result = booking_repository.update(db, booking.id, {"status": BookingStatus.confirmed})
        assert result.status == BookingStatus.confirmed

    @pytest.mark.parametrize("field", ["property_id", "applicant_id", "reason_of_stay", "version"])
    def test_immutable_fields(self, db, field):
        booking = make_booking(db, make_property(db))
        with pytest.raises(ValidationError):
            booking_repository.update(db, booking.id, {field: "x"})

    def test_update_missing(self, db):
        with pytest.raises(NotFoundError):
            booking_repository.update(db, new_id(), {"admin_notes": "hello"})

    def test_stale_version(self, db):
        booking = make_booking(db, make_property(db))
        booking_repository.update(db, booking.id, {"admin_notes": "first"})
        with pytest.raises(ConflictError):
            booking_repository.update(db, booking.id, {"admin_notes": "second"}, expected_version=1)
        assert booking_repository.get_by_id(db, booking.id).admin_notes == "first"


class TestStatusCounts:
    def test_counts_zero_filled(self, db):
        prop = make_property(db)
        other_prop = make_property(db, owner_id=STRANGER_ID, title="Other")
        b1 = make_booking(db, prop)
        make_booking(db, prop, applicant_id=STRANGER_ID)
        make_booking(db, other_prop)
        lifecycle.transition(db, b1.id, OWNER_ID, BookingStatus.approved)

        counts = booking_repository.status_counts(db, OWNER_ID)
        assert counts == {
            "under_review": 1,
            "approved": 1,
            "rejected": 0,
            "request_additional_details": 0,
            "confirmed": 0,
        }


class TestOccupancy:
    def test_rate_is_rounded(self, db):
        make_property(db, title="A", status=PropertyStatus.occupied)
        make_property(db, title="B", status=PropertyStatus.occupied)
        make_property(db, title="C")
        assert catalog.occupancy(db, OWNER_ID) == {
            "total_properties": 3,
            "occupied_properties": 2,
            "occupancy_rate": 67,
        }

    def test_fully_occupied(self, db):
        make_property(db, status=PropertyStatus.occupied)
        assert catalog.occupancy(db, OWNER_ID)["occupancy_rate"] == 100

    def test_no_properties(self, db):
        make_property(db, owner_id=STRANGER_ID, status=PropertyStatus.occupied)
        assert catalog.occupancy(db, OWNER_ID) == {
            "total_properties": 0,
            "occupied_properties": 0,
            "occupancy_rate": 0,
        }
