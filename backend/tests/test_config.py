"""
CodeVault Backend — Settings Tests

What we test:
    ✅ CSV settings split into lists
    ✅ Invalid log level / algorithm rejected at load time
    ✅ Production check reports placeholder secrets, unknown required fields
       and required-field lists that leave out a NOT NULL column
"""

import pytest
from pydantic import ValidationError

from codevault.config import Settings

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


def test_csv_fields_split():
    config = Settings(
        jwt_secret=SECRET,
        admin_subject_ids=" root , ops ,",
        user_required_fields="email, name, country",
    )

    assert config.admin_subject_ids_list == ["root", "ops"]
    assert config.user_required_fields_list == ["email", "name", "country"]
    assert config.code_required_fields_list == ["language", "body"]


def test_log_level_normalized():
    assert Settings(jwt_secret=SECRET, log_level="debug").log_level == "DEBUG"


def test_invalid_log_level():
    with pytest.raises(ValidationError):
        Settings(jwt_secret=SECRET, log_level="LOUD")


def test_asymmetric_algorithm_rejected():
    with pytest.raises(ValidationError):
        Settings(jwt_secret=SECRET, jwt_algorithm="RS256")


def test_production_check_passes():
    Settings(jwt_secret=SECRET).validate_required_for_production()


def test_production_check_reports_every_problem():
    config = Settings(jwt_secret="change-me", code_required_fields="language,author")

    with pytest.raises(ValueError) as exc_info:
        config.validate_required_for_production()

    message = str(exc_info.value)
    assert "JWT_SECRET" in message
    assert "author" in message


def test_production_check_rejects_lists_missing_not_null_columns():
    config = Settings(jwt_secret=SECRET, code_required_fields="language")

    with pytest.raises(ValueError, match=r"CODE_REQUIRED_FIELDS must include: \['body'\]"):
        config.validate_required_for_production()
