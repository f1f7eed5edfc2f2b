"""
Tests for shot editing and reordering.
"""

import pytest

from studio.crud.generation import image_generation_crud
from studio.crud.shot import shot_crud
from studio.exceptions import NotFoundError, ValidationError
from studio.models import CameraMovement, ShotMood
from studio.services.shot_service import ShotService, validate_shot_update
from tests.factories import make_image, make_project, make_shots


@pytest.fixture
def shots_service():
    return ShotService()


@pytest.fixture
async def project_shots(session):
    project = await make_project(session)
    shots = await make_shots(session, project, [4.0, 2.5, 6.0])
    return project, shots


# ============================================================================
# Validation
# ============================================================================


def test_update_coerces_enums_and_trims_description():
    clean = validate_shot_update(
        {"camera_movement": "PAN_LEFT", "mood": "PEACEFUL", "description": "  Dawn  ", "duration": "3"}
    )

    assert clean == {
        "camera_movement": CameraMovement.PAN_LEFT,
        "mood": ShotMood.PEACEFUL,
        "description": "Dawn",
        "duration": 3.0,
    }


@pytest.mark.parametrize(
    "data",
    [
        {"duration": 0.2},
        {"duration": 61},
        {"description": "   "},
        {"mood": "SILLY"},
        {"shot_index": 4},
    ],
)
def test_invalid_updates_are_rejected(data):
    with pytest.raises(ValidationError):
        validate_shot_update(data)


def test_none_values_are_ignored():
    assert validate_shot_update({"description": None, "duration": 5}) == {"duration": 5.0}


# ============================================================================
# Editing
# ============================================================================


@pytest.mark.asyncio
async def test_update_shot_persists_fields(session, shots_service, project_shots):
    _, shots = project_shots

    updated = await shots_service.update_shot(session, shots[1].id, {"duration": 5.5, "mood": "ACTION"})

    assert updated.duration == 5.5
    assert updated.mood == ShotMood.ACTION
    assert updated.images == []


@pytest.mark.asyncio
async def test_delete_shot_closes_index_gap(session, shots_service, project_shots):
    project, shots = project_shots
    await make_image(session, shots[1], selected=True)

    await shots_service.delete_shot(session, shots[1].id)

    remaining = await shot_crud.list_by_project(session, project.id)
    assert [s.id for s in remaining] == [shots[0].id, shots[2].id]
    assert [s.shot_index for s in remaining] == [0, 1]
    assert await image_generation_crud.count_for_shot(session, shots[1].id) == 0


@pytest.mark.asyncio
async def test_reorder_follows_given_ids(session, shots_service, project_shots):
    project, shots = project_shots
    order = [shots[2].id, shots[0].id, shots[1].id]

    reordered = await shots_service.reorder_shots(session, project.id, order)

    assert [s.id for s in reordered] == order
    assert [s.shot_index for s in reordered] == [0, 1, 2]


@pytest.mark.asyncio
async def test_reorder_requires_every_shot_once(session, shots_service, project_shots):
    project, shots = project_shots

    with pytest.raises(ValidationError):
        await shots_service.reorder_shots(session, project.id, [shots[0].id, shots[1].id])
    with pytest.raises(ValidationError):
        await shots_service.reorder_shots(
            session, project.id, [shots[0].id, shots[0].id, shots[1].id]
        )


@pytest.mark.asyncio
async def test_unknown_shot_is_not_found(session, shots_service):
    from uuid import uuid4

    with pytest.raises(NotFoundError):
        await shots_service.get_shot(session, uuid4())
