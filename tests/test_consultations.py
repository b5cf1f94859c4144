import pytest

from core.errors import NotFound, ValidationFailed
from services import consultationService
from tests.conftest import make_user


@pytest.fixture
def consultation(customer):
    return consultationService.create_consultation(customer.id, "Dosage question", "Can I take ibuprofen twice a day?")


def test_create_starts_pending(consultation, customer):
    assert consultation.status == "pending"
    assert consultation.user_id == customer.id
    assert consultation.pharmacist_id is None
    assert consultation.response is None


def test_create_validation(customer):
    with pytest.raises(ValidationFailed):
        consultationService.create_consultation(customer.id, "", "message")
    with pytest.raises(NotFound):
        consultationService.create_consultation(999, "subject", "message")


def test_user_and_pending_lists(consultation, customer, other_customer, pharmacist):
    other = consultationService.create_consultation(other_customer.id, "Allergy", "Is this safe?")
    consultationService.assign_consultation(other.id, pharmacist.id)

    assert [c.id for c in consultationService.get_user_consultations(customer.id)] == [consultation.id]
    assert [c.id for c in consultationService.get_pending_consultations()] == [consultation.id]


def test_assign_then_respond(consultation, pharmacist):
    assigned = consultationService.assign_consultation(consultation.id, pharmacist.id)
    assert assigned.status == "in_progress"
    assert assigned.pharmacist_id == pharmacist.id

    answered = consultationService.respond_to_consultation(consultation.id, pharmacist.id, "Yes, with food.")
    assert answered.status == "completed"
    assert answered.response == "Yes, with food."


def test_assign_unknown_consultation(pharmacist):
    with pytest.raises(NotFound, match="Consultation not found"):
        consultationService.assign_consultation(404, pharmacist.id)


def test_respond_by_unassigned_pharmacist(consultation, pharmacist):
    colleague = make_user("colleague@test.com", role="pharmacist")
    consultationService.assign_consultation(consultation.id, pharmacist.id)

    with pytest.raises(NotFound, match="not assigned to this pharmacist"):
        consultationService.respond_to_consultation(consultation.id, colleague.id, "Sure")
    assert consultation.status == "in_progress"


def test_respond_before_assignment(consultation, pharmacist):
    with pytest.raises(NotFound):
        consultationService.respond_to_consultation(consultation.id, pharmacist.id, "Hello")


def test_respond_requires_text(consultation, pharmacist):
    consultationService.assign_consultation(consultation.id, pharmacist.id)
    with pytest.raises(ValidationFailed):
        consultationService.respond_to_consultation(consultation.id, pharmacist.id, "")


@pytest.mark.parametrize("role", [None, "customer"])
def test_assign_to_user_who_is_not_a_pharmacist(consultation, role):
    assignee_id = make_user("helper@test.com", role=role).id if role else 4242

    with pytest.raises(ValidationFailed, match=f"User with ID {assignee_id} is not a pharmacist"):
        consultationService.assign_consultation(consultation.id, assignee_id)
    assert consultation.status == "pending"
    assert consultation.pharmacist_id is None


def test_admin_can_take_a_consultation(consultation, admin):
    assert consultationService.assign_consultation(consultation.id, admin.id).pharmacist_id == admin.id
