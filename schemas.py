"""
Document Schemas for the Reality Show API

All shows live in a single MongoDB collection ("reality_shows").  The
stored documents use Portuguese field names; the models expose English
attribute names and keep the stored names as aliases so documents can be
validated straight from pymongo and dumped back with ``by_alias=True``.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Prize(BaseModel):
    """
    A prize won by a participant. Only ``valor`` is interpreted; any other
    descriptive fields are carried through untouched.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    value: Union[int, float] = Field(..., alias="valor", description="Prize value")


class Participant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[Union[int, str]] = Field(None, description="Unique within its show")
    name: str = Field(..., alias="nome")
    age: Optional[Union[int, float]] = Field(None, alias="idade", description="None when unknown")
    eliminated: bool = Field(False, alias="eliminado")
    total_votes: int = Field(0, ge=0, alias="total_votos")
    prizes: List[Prize] = Field(default_factory=list, alias="premios")

    @field_validator("age", mode="before")
    @classmethod
    def unknown_age(cls, v):
        # Records created by a vote are stored with idade 0
        return None if v in (None, 0) else v

    @field_validator("total_votes", mode="before")
    @classmethod
    def missing_votes(cls, v):
        return 0 if v is None else v


class Show(BaseModel):
    """
    A reality show document
    Collection name: "reality_shows"
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., alias="nome", description="Unique show name")
    broadcaster: Optional[str] = Field(None, alias="emissora")
    audience_points: Union[int, float] = Field(0, alias="audiencia_pontos")
    participants: List[Participant] = Field(default_factory=list, alias="participantes")

    @field_validator("participants", mode="before")
    @classmethod
    def missing_participants(cls, v):
        return [] if v is None else v

    def find_participant(self, name: str) -> Optional[Participant]:
        """First participant whose name equals ``name`` ignoring case."""
        wanted = name.casefold()
        for participant in self.participants:
            if participant.name.casefold() == wanted:
                return participant
        return None


# Request bodies

class VoteRequest(BaseModel):
    reality: str = Field(..., min_length=1, description="Show name")
    participante: str = Field(..., min_length=1, description="Participant name")
