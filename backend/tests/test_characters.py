"""
Tests for the character library.
"""

from uuid import uuid4

import pytest

from studio.crud.character import character_crud
from studio.exceptions import NotFoundError, ValidationError
from studio.models import VariationType
from studio.services.character_service import CharacterService
from studio.services.prompt_builder import build_image_prompt
from tests.fakes import FakeStorage

PNG_DATA_URI = "data:image/png;base64,iVBORw0KGgo="


@pytest.fixture
def characters(storage):
    return CharacterService(storage=storage)


@pytest.fixture
async def moses(session, characters):
    return await characters.create_character(
        session, "  Moses ", VariationType.ADULT, description="bearded shepherd in wool robes"
    )


# ============================================================================
# Characters and variations
# ============================================================================


@pytest.mark.asyncio
async def test_create_character_with_first_variation(moses):
    assert moses.name == "Moses"
    (variation,) = moses.variations
    assert variation.type == VariationType.ADULT
    assert variation.label == "Adult"
    assert variation.description == "bearded shepherd in wool robes"


@pytest.mark.asyncio
async def test_blank_name_is_rejected(session, characters):
    with pytest.raises(ValidationError):
        await characters.create_character(session, "   ")


@pytest.mark.asyncio
async def test_custom_label_only_kept_for_custom_variations(session, characters, moses):
    old = await characters.add_variation(session, moses.id, VariationType.OLD, custom_label="ignored")
    exiled = await characters.add_variation(
        session, moses.id, VariationType.CUSTOM, custom_label="In exile"
    )

    assert old.custom_label is None
    assert exiled.label == "In exile"
    reloaded = await characters.get_character(session, moses.id)
    assert {v.type for v in reloaded.variations} == {
        VariationType.ADULT,
        VariationType.OLD,
        VariationType.CUSTOM,
    }


@pytest.mark.asyncio
async def test_update_renames_and_describes_own_variations_only(session, characters, moses):
    aaron = await characters.create_character(session, "Aaron", description="priestly robes")

    updated = await characters.update_character(
        session,
        moses.id,
        name="Moshe",
        descriptions={
            moses.variations[0].id: "white beard, staff in hand",
            aaron.variations[0].id: "should not change",
        },
    )

    assert updated.name == "Moshe"
    assert updated.variations[0].description == "white beard, staff in hand"
    aaron = await characters.get_character(session, aaron.id)
    assert aaron.variations[0].description == "priestly robes"


@pytest.mark.asyncio
async def test_delete_character_removes_variations_and_images(session, characters, moses):
    variation_id = moses.variations[0].id
    image = await characters.add_reference_image(session, variation_id, PNG_DATA_URI)

    await characters.delete_character(session, moses.id)

    assert await character_crud.get(session, moses.id) is None
    assert await character_crud.get_variation(session, variation_id) is None
    assert await character_crud.get_image(session, image.id) is None
    with pytest.raises(NotFoundError):
        await characters.delete_character(session, moses.id)


# ============================================================================
# Reference images
# ============================================================================


@pytest.mark.asyncio
async def test_first_reference_image_is_primary(session, characters, moses):
    variation_id = moses.variations[0].id

    first = await characters.add_reference_image(session, variation_id, "https://refs.example.com/a.png")
    second = await characters.add_reference_image(session, variation_id, "https://refs.example.com/b.png")

    assert first.is_primary is True
    assert second.is_primary is False
    assert first.image_url == "https://refs.example.com/a.png"


@pytest.mark.asyncio
async def test_set_primary_is_exclusive(session, characters, moses):
    variation_id = moses.variations[0].id
    first = await characters.add_reference_image(session, variation_id, "https://refs.example.com/a.png")
    second = await characters.add_reference_image(session, variation_id, "https://refs.example.com/b.png")

    await characters.set_primary_image(session, second.id)

    assert (await character_crud.get_image(session, first.id)).is_primary is False
    assert (await character_crud.get_image(session, second.id)).is_primary is True


@pytest.mark.asyncio
async def test_deleting_primary_promotes_oldest_remaining(session, characters, moses):
    variation_id = moses.variations[0].id
    first = await characters.add_reference_image(session, variation_id, "https://refs.example.com/a.png")
    second = await characters.add_reference_image(session, variation_id, "https://refs.example.com/b.png")

    await characters.delete_reference_image(session, first.id)

    assert (await character_crud.get_image(session, second.id)).is_primary is True


@pytest.mark.asyncio
async def test_reference_image_stored_under_character_key(session, moses):
    storage = FakeStorage(configured=True)
    characters = CharacterService(storage=storage)
    variation_id = moses.variations[0].id

    image = await characters.add_reference_image(session, variation_id, PNG_DATA_URI)

    (key,) = storage.objects
    assert key.startswith(f"characters/{moses.id}/{variation_id}_") and key.endswith(".png")
    assert image.image_url == f"s3://test-bucket/{key}"

    await characters.delete_reference_image(session, image.id)

    assert storage.objects == {}


@pytest.mark.asyncio
async def test_reference_image_requires_url_or_data_uri(session, characters, moses):
    with pytest.raises(ValidationError):
        await characters.add_reference_image(session, moses.variations[0].id, "file:///etc/passwd")
    with pytest.raises(NotFoundError):
        await characters.add_reference_image(session, uuid4(), PNG_DATA_URI)


# ============================================================================
# Prompt fragments
# ============================================================================


@pytest.mark.asyncio
async def test_describe_keeps_order_and_skips_blank_descriptions(session, characters, moses):
    aaron = await characters.create_character(session, "Aaron")
    miriam = await characters.create_character(session, "Miriam", description="tambourine, bright shawl")

    fragments = await characters.describe(
        session, [miriam.variations[0].id, aaron.variations[0].id, moses.variations[0].id]
    )

    assert fragments == [
        "Miriam: tambourine, bright shawl",
        "Moses: bearded shepherd in wool robes",
    ]
    with pytest.raises(NotFoundError):
        await characters.describe(session, [uuid4()])


def test_prompt_places_characters_after_style_and_before_framing():
    prompt = build_image_prompt(
        "Crossing the sea", character_descriptions=["Moses: white beard", "  Aaron: priestly robes "]
    )

    parts = prompt.split(", ")
    assert parts.index("Moses: white beard") < parts.index("Aaron: priestly robes")
    assert parts[-1] == "wide 16:9 composition"
    assert build_image_prompt("Crossing the sea", character_descriptions=[]) == build_image_prompt(
        "Crossing the sea"
    )
