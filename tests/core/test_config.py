from etag_interceptor.core.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ETAG_ON_NOT_MODIFIED", raising=False)
        settings = Settings(ENVIRONMENT="testing")

        assert settings.ETAG_HEADER == "ETag"
        assert settings.IF_NONE_MATCH_HEADER == "If-None-Match"
        assert settings.ETAG_ON_NOT_MODIFIED is False
        assert settings.ETAG_METHODS == ["GET", "HEAD"]
        assert settings.FINGERPRINT_ALGORITHM == "md5"

    def test_environment_overrides(self):
        assert Settings(ENVIRONMENT="development").LOG_LEVEL == "DEBUG"
        assert Settings(ENVIRONMENT="testing").LOG_LEVEL == "ERROR"

        production = Settings(ENVIRONMENT="production")
        assert production.LOG_LEVEL == "WARNING"
        assert production.DEBUG is False
        assert production.is_production

    def test_reads_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ETAG_ON_NOT_MODIFIED", "true")
        monkeypatch.setenv("FINGERPRINT_ALGORITHM", "sha256")

        settings = Settings()

        assert settings.ETAG_ON_NOT_MODIFIED is True
        assert settings.FINGERPRINT_ALGORITHM == "sha256"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
