"""Shared fixtures: an in-memory MongoDB seeded with a few shows."""

import copy

import mongomock
import pytest
from fastapi.testclient import TestClient

from main import create_app

SHOWS = [
    {
        "nome": "BBB",
        "emissora": "Globo",
        "audiencia_pontos": 30,
        "participantes": [
            {"id": 1, "nome": "Ana", "idade": 25, "eliminado": False, "total_votos": 0,
             "premios": [{"descricao": "Carro", "valor": 50000}]},
            {"id": 2, "nome": "Carlos", "idade": 31, "eliminado": True, "total_votos": 3,
             "premios": [{"descricao": "Viagem", "valor": 10000}, {"descricao": "Bonus", "valor": 2000}]},
            {"id": 3, "nome": "Duda", "idade": 22, "eliminado": False, "premios": []},
        ],
    },
    {
        "nome": "A Fazenda",
        "emissora": "Record",
        "audiencia_pontos": 12,
        "participantes": [
            {"id": 10, "nome": "Eva", "idade": 40, "eliminado": False, "total_votos": 7,
             "premios": [{"descricao": "Premio final", "valor": 1500000}]},
            {"id": 11, "nome": "Fabio", "idade": 40, "eliminado": False, "premios": []},
        ],
    },
    {
        "nome": "No Limite",
        "emissora": "Globo",
        "audiencia_pontos": 8,
        "participantes": [
            {"id": 20, "nome": "Gil", "idade": 29, "eliminado": False, "premios": []},
        ],
    },
]


@pytest.fixture
def db():
    return mongomock.MongoClient()["reality_show"]


@pytest.fixture
def collection(db):
    col = db["reality_shows"]
    col.insert_many(copy.deepcopy(SHOWS))
    return col


@pytest.fixture
def client(db, collection):
    return TestClient(create_app(db=db))