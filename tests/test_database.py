"""Tests for settings and the MongoDB connection helpers."""

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

import database
from config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ["DATABASE_NAME", "COLLECTION_NAME", "CONNECT_TIMEOUT_MS", "PORT", "CORS_ORIGINS"]:
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.database_name == "reality_show"
        assert settings.collection_name == "reality_shows"
        assert settings.connect_timeout_ms == 10000
        assert settings.port == 3000
        assert settings.cors_origins == ["*"]

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "mongodb://db:27017")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
        settings = Settings()
        assert settings.database_url == "mongodb://db:27017"
        assert settings.port == 8080
        assert settings.cors_origins == ["http://a.test", "http://b.test"]

    def test_mongodb_uri_fallback(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("MONGODB_URI", "mongodb+srv://cluster.test")
        assert Settings().database_url == "mongodb+srv://cluster.test"


class TestConnect:
    def settings(self, **overrides):
        return Settings(**{"database_url": "mongodb://db:27017", **overrides})

    def test_returns_named_database(self):
        with patch("database.MongoClient") as mongo_client:
            db = database.connect(self.settings())

        client = mongo_client.return_value
        client.admin.command.assert_called_once_with("ping")
        client.__getitem__.assert_called_once_with("reality_show")
        assert db is client.__getitem__.return_value

    def test_timeouts_are_bounded(self):
        with patch("database.MongoClient") as mongo_client:
            database.connect(self.settings(connect_timeout_ms=10000))

        kwargs = mongo_client.call_args.kwargs
        assert kwargs["connectTimeoutMS"] == 10000
        assert kwargs["serverSelectionTimeoutMS"] == 10000

    def test_unreachable_server(self):
        with patch("database.MongoClient") as mongo_client:
            mongo_client.return_value.admin.command.side_effect = ServerSelectionTimeoutError("timed out")
            with pytest.raises(database.DatabaseConnectionError, match="timed out"):
                database.connect(self.settings())
        mongo_client.return_value.close.assert_called_once()

    def test_bad_credentials(self):
        with patch("database.MongoClient") as mongo_client:
            mongo_client.return_value.admin.command.side_effect = OperationFailure("auth failed")
            with pytest.raises(ConnectionError):
                database.connect(self.settings())

    def test_missing_url(self):
        with patch("database.MongoClient") as mongo_client:
            with pytest.raises(database.DatabaseConnectionError):
                database.connect(Settings(database_url=""))
        mongo_client.assert_not_called()

    def test_close(self):
        db = MagicMock()
        database.close(db)
        db.client.close.assert_called_once()
        database.close(None)
