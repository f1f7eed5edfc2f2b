"""
Character library models.

A character owns one or more variations (young, adult, ...). Each variation
carries the text description injected into image prompts and any number of
reference images, at most one of them primary.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, Relationship

from studio.models.base import BaseUUIDModel, enum_column, utc_now
from studio.models.enums import VariationType


class Character(BaseUUIDModel, table=True):
    """
    A recurring on-screen character.

    Table: characters
    """
    __tablename__ = "characters"

    name: str = Field(max_length=255, nullable=False, index=True)
    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utc_now},
    )

    variations: List["CharacterVariation"] = Relationship(
        back_populates="character",
        sa_relationship_kwargs={"order_by": "CharacterVariation.created_at"},
    )


class CharacterVariation(BaseUUIDModel, table=True):
    """
    Table: character_variations

    custom_label is only kept for CUSTOM variations.
    """
    __tablename__ = "character_variations"

    character_id: UUID = Field(foreign_key="characters.id", nullable=False, index=True)
    type: VariationType = Field(
        default=VariationType.ADULT,
        sa_column=enum_column(VariationType, "variation_type"),
    )
    custom_label: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))

    character: Optional[Character] = Relationship(back_populates="variations")
    images: List["CharacterReferenceImage"] = Relationship(
        back_populates="variation",
        sa_relationship_kwargs={"order_by": "CharacterReferenceImage.created_at"},
    )

    @property
    def label(self) -> str:
        if self.type == VariationType.CUSTOM and self.custom_label:
            return self.custom_label
        return VariationType(self.type).value.capitalize()


class CharacterReferenceImage(BaseUUIDModel, table=True):
    """Table: character_reference_images"""
    __tablename__ = "character_reference_images"

    variation_id: UUID = Field(
        foreign_key="character_variations.id", nullable=False, index=True
    )
    image_url: str = Field(sa_column=Column(Text, nullable=False))
    is_primary: bool = Field(default=False, nullable=False)

    variation: Optional[CharacterVariation] = Relationship(back_populates="images")
