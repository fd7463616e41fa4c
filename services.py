"""
Query and vote services over the ``reality_shows`` collection.

Both services receive the pymongo collection when they are built, so the
routes never touch a module-level connection and tests can hand in any
collection-like object.  ``ShowQueryService`` is read-only;
``VoteService`` is the only code path that writes.
"""
import logging
import re
import threading
import time
from typing import Any, Dict, List

from pymongo.collection import Collection

from schemas import Participant, Show

logger = logging.getLogger(__name__)


class ShowNotFound(LookupError):
    def __init__(self, name: str):
        super().__init__(f"Reality show {name!r} not found")
        self.name = name


class ParticipantIdGenerator:
    """Millisecond timestamps, bumped when two ids land in the same millisecond."""

    def __init__(self):
        self._lock = threading.Lock()
        self._last = 0

    def __call__(self) -> int:
        with self._lock:
            self._last = max(self._last + 1, int(time.time() * 1000))
            return self._last


next_participant_id = ParticipantIdGenerator()


def _name_pattern(name: str) -> "re.Pattern[str]":
    return re.compile("^" + re.escape(name) + "$", re.IGNORECASE)


def get_show(collection: Collection, name: str) -> Show:
    doc = collection.find_one({"nome": name})
    if not doc:
        raise ShowNotFound(name)
    return Show.model_validate(doc)


def _dump_participant(participant: Participant) -> Dict[str, Any]:
    return participant.model_dump(by_alias=True)


class ShowQueryService:
    def __init__(self, collection: Collection):
        self.collection = collection

    def prize_summary(self) -> List[Dict[str, Any]]:
        summary = []
        for doc in self.collection.find({}):
            show = Show.model_validate(doc)
            summary.append({
                "id": str(doc["_id"]),
                "nome": show.name,
                "participantes": [
                    {"nome": p.name, "premios": [prize.model_dump(by_alias=True) for prize in p.prizes]}
                    for p in show.participants
                ],
            })
        return summary

    def age_extremes(self, show_name: str) -> Dict[str, Any]:
        """Youngest and oldest participant of a show.

        Unknown ages rank behind every known age on both ends, so a
        participant created by a vote is only reported when nobody in the
        show has a known age.  Ties go to the participant stored first.
        """
        show = get_show(self.collection, show_name)
        if not show.participants:
            return {"reality": show.name, "maisNovo": None, "maisVelho": None}

        youngest = min(show.participants, key=lambda p: (p.age is None, p.age or 0))
        oldest = max(show.participants, key=lambda p: (p.age is not None, p.age or 0))
        return {
            "reality": show.name,
            "maisNovo": _dump_participant(youngest),
            "maisVelho": _dump_participant(oldest),
        }

    def prizes_at_least(self, threshold: float) -> List[Dict[str, Any]]:
        pipeline = [
            {"$unwind": "$participantes"},
            {"$unwind": "$participantes.premios"},
            {"$match": {"participantes.premios.valor": {"$gte": threshold}}},
            {"$project": {
                "_id": 0,
                "emissora": 1,
                "nome": 1,
                "participante": "$participantes.nome",
                "premio": "$participantes.premios",
            }},
        ]
        return list(self.collection.aggregate(pipeline))

    def total_prizes_per_show(self) -> List[Dict[str, Any]]:
        pipeline = [
            {"$unwind": "$participantes"},
            {"$unwind": "$participantes.premios"},
            {"$group": {"_id": "$nome", "totalPremios": {"$sum": "$participantes.premios.valor"}}},
            {"$project": {"_id": 0, "reality": "$_id", "totalPremios": 1}},
            {"$sort": {"reality": 1}},
        ]
        return list(self.collection.aggregate(pipeline))

    def audience_per_broadcaster(self) -> List[Dict[str, Any]]:
        pipeline = [
            {"$group": {"_id": "$emissora", "totalPontos": {"$sum": "$audiencia_pontos"}}},
            {"$project": {"_id": 0, "emissora": "$_id", "totalPontos": 1}},
            {"$sort": {"emissora": 1}},
        ]
        return list(self.collection.aggregate(pipeline))


class VoteService:
    def __init__(self, collection: Collection, id_generator=next_participant_id):
        self.collection = collection
        self.id_generator = id_generator

    def _increment(self, show_name: str, participant: Participant) -> None:
        # Match on the stored spelling so the positional $ hits that entry
        self.collection.update_one(
            {"nome": show_name, "participantes.nome": participant.name},
            {"$inc": {"participantes.$.total_votos": 1}},
        )
        logger.debug("Vote for %r in %r", participant.name, show_name)

    def register_vote(self, show_name: str, participant_name: str) -> Dict[str, bool]:
        show = get_show(self.collection, show_name)

        existing = show.find_participant(participant_name)
        if existing is not None:
            self._increment(show_name, existing)
            return {"ok": True}

        new_participant = {
            "id": self.id_generator(),
            "nome": participant_name,
            "idade": 0,
            "total_votos": 1,
            "eliminado": False,
            "premios": [],
        }
        # Only append while no participant of this show matches the name,
        # so two concurrent first votes cannot create duplicates.
        res = self.collection.update_one(
            {
                "nome": show_name,
                "participantes": {"$not": {"$elemMatch": {"nome": _name_pattern(participant_name)}}},
            },
            {"$push": {"participantes": new_participant}},
        )
        if res.matched_count:
            logger.info("New participant %r added to %r", participant_name, show_name)
            return {"ok": True}

        # Lost the race to another vote (or the show is gone): count this one
        show = get_show(self.collection, show_name)
        existing = show.find_participant(participant_name)
        if existing is not None:
            self._increment(show_name, existing)
            return {"ok": True}

        # The server's case folding matched a name ours does not
        logger.warning("No casefold match for %r in %r, appending it", participant_name, show_name)
        res = self.collection.update_one(
            {"nome": show_name},
            {"$push": {"participantes": new_participant}},
        )
        if not res.matched_count:
            raise ShowNotFound(show_name)
        return {"ok": True}

    def tally(self, show_name: str) -> List[Dict[str, Any]]:
        show = get_show(self.collection, show_name)
        return [{"nome": p.name, "total_votos": p.total_votes} for p in show.participants]
