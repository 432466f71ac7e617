"""
Tests for the Auto-Assign Children Client

Family eligibility, available-student counting and the HTTP call.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest

from gubaye.services.auto_assign import (
    AssignmentOptions,
    AutoAssignClient,
    AutoAssignError,
    AutoAssignNotConfiguredError,
    count_available_students,
    eligible_families,
    placed_student_ids,
)


def _student(batch: str = "2023/2024", is_active: bool = True):
    return SimpleNamespace(
        id=uuid4(), gender="male", batch=batch, is_active=is_active, full_name="Test Student"
    )


def _family(status: str = "current", father=None, mother=None, leader=None):
    unit = SimpleNamespace(
        id=uuid4(),
        father=father,
        father_id=father.id if father else None,
        father_phone=None,
        father_email=None,
        father_occupation=None,
        mother=mother,
        mother_id=mother.id if mother else None,
        mother_phone=None,
        mother_email=None,
        mother_occupation=None,
        created_at=None,
        children=[],
    )
    gp = SimpleNamespace(
        id=uuid4(), title="Elders", grand_father=None, grand_mother=None, family_units=[unit]
    )
    return SimpleNamespace(
        id=uuid4(),
        status=status,
        title="Family",
        location="Adama",
        batch="2023/2024",
        allow_other_batches=False,
        family_date=None,
        family_leader=leader,
        family_co_leader=None,
        family_secretary=None,
        grand_parents=[gp],
    )


class TestEligibility:
    def test_current_family_with_both_parents(self):
        family = _family(father=_student(), mother=_student())
        assert eligible_families([family]) == [family]

    def test_missing_parent_not_eligible(self):
        assert eligible_families([_family(father=_student())]) == []

    def test_finished_family_not_eligible(self):
        family = _family(status="finished", father=_student(), mother=_student())
        assert eligible_families([family]) == []


class TestAvailableStudents:
    def test_placed_students_are_not_available(self):
        father, mother, free = _student(), _student(), _student()
        family = _family(father=father, mother=mother)

        assert placed_student_ids([family]) == {father.id, mother.id}
        assert count_available_students([father, mother, free], [family]) == 1

    def test_students_in_finished_families_are_available(self):
        father = _student()
        family = _family(status="finished", father=father)
        assert count_available_students([father], [family]) == 1

    def test_inactive_and_other_batches_excluded(self):
        students = [_student(), _student(is_active=False), _student(batch="2022/2023")]
        assert count_available_students(students, [], batches={"2023/2024"}) == 1


class TestClient:
    def test_from_settings(self):
        with patch("gubaye.services.auto_assign.settings") as mock_settings:
            mock_settings.AUTO_ASSIGN_SERVICE_URL = "https://assign.example.org/api/"
            mock_settings.AUTO_ASSIGN_API_TOKEN = "token"
            mock_settings.AUTO_ASSIGN_TIMEOUT_SECONDS = 5.0

            client = AutoAssignClient.from_settings()

        assert client.endpoint == "https://assign.example.org/api/auto-assign-children"
        assert client.api_token == "token"
        assert client.is_configured

    async def test_not_configured(self):
        client = AutoAssignClient(base_url="")

        with pytest.raises(AutoAssignNotConfiguredError):
            await client.request_assignment(family_ids=[], batches=[], available_students=0)

    async def test_request_payload(self):
        client = AutoAssignClient(base_url="https://assign.example.org", api_token="secret")
        family_id = uuid4()

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_response = MagicMock()
            mock_response.status_code = 200
            mock_post.return_value = mock_response

            await client.request_assignment(
                family_ids=[family_id], batches=["2023/2024"], available_students=12
            )

            mock_post.assert_called_once()
            assert mock_post.call_args.args[0] == "https://assign.example.org/auto-assign-children"
            call_kwargs = mock_post.call_args.kwargs
            assert call_kwargs["json"] == {
                "familyIds": [str(family_id)],
                "batches": ["2023/2024"],
                "availableStudents": 12,
                "targetBatch": None,
                "mode": "homogeneous",
                "maxChildrenPerFamily": 10,
                "considerGenderBalance": True,
                "considerAge": True,
                "addressLevel": "kebele",
            }
            assert call_kwargs["headers"]["Authorization"] == "Bearer secret"

    async def test_matching_options_forwarded(self):
        client = AutoAssignClient(base_url="https://assign.example.org")
        options = AssignmentOptions(
            target_batch="2024/2025",
            mode="heterogeneous",
            max_children_per_family=4,
            consider_age=False,
            address_level="zone",
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = MagicMock(status_code=200)

            await client.request_assignment(
                family_ids=[uuid4()], batches=["2024/2025"], available_students=3, options=options
            )

            payload = mock_post.call_args.kwargs["json"]
            assert payload["targetBatch"] == "2024/2025"
            assert payload["mode"] == "heterogeneous"
            assert payload["maxChildrenPerFamily"] == 4
            assert payload["considerGenderBalance"] is True
            assert payload["considerAge"] is False
            assert payload["addressLevel"] == "zone"

    async def test_service_error(self):
        client = AutoAssignClient(base_url="https://assign.example.org")

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_response = MagicMock()
            mock_response.status_code = 500
            mock_response.json.return_value = {"message": "No students left"}
            mock_post.return_value = mock_response

            with pytest.raises(AutoAssignError) as exc_info:
                await client.request_assignment(
                    family_ids=[uuid4()], batches=[], available_students=0
                )

        assert "No students left" in str(exc_info.value)

    async def test_transport_error_wrapped(self):
        client = AutoAssignClient(base_url="https://assign.example.org")

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock) as mock_post:
            mock_post.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(AutoAssignError, match="HTTP error"):
                await client.request_assignment(
                    family_ids=[uuid4()], batches=[], available_students=0
                )
