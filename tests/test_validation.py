"""
Request validation tests
"""

from datetime import date, timedelta

from account_service.application.requests import (
    ImageUpload,
    LoginRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)
from account_service.application.validation import (
    MAX_IMAGE_BYTES,
    parse_date,
    validate_login,
    validate_new_password,
    validate_register,
    validate_reset_password,
    validate_update_profile,
)

from .conftest import make_register_request


def _fields(errors):
    return {error.field: error.code for error in errors}


class TestRegisterValidation:
    def test_valid_request_has_no_errors(self):
        request = make_register_request(phone="+15551234567", date_of_birth="1990-04-12", role="GUIDE")
        assert validate_register(request) == []

    def test_missing_fields_are_reported_individually(self):
        errors = validate_register(
            make_register_request(email=None, password=None, first_name=None, last_name=None)
        )
        assert _fields(errors) == {
            "firstName": "required",
            "lastName": "required",
            "email": "required",
            "password": "required",
        }

    def test_name_length_bounds(self):
        errors = validate_register(make_register_request(first_name="A", last_name="B" * 51))
        assert _fields(errors) == {"firstName": "too_short", "lastName": "too_long"}

    def test_invalid_email(self):
        errors = validate_register(make_register_request(email="not-an-email"))
        assert _fields(errors) == {"email": "invalid"}
        assert errors[0].message == "Please provide a valid email"

    def test_password_rules(self):
        assert _fields(validate_register(make_register_request(password="Sh0rt!"))) == {"password": "too_short"}
        assert _fields(validate_register(make_register_request(password="alllowercase1!"))) == {"password": "weak"}
        assert _fields(validate_register(make_register_request(password="NoSpecial123"))) == {"password": "weak"}

    def test_password_byte_limit(self):
        assert validate_register(make_register_request(password="Aa1!" + "x" * 68)) == []
        assert _fields(validate_register(make_register_request(password="Aa1!" + "x" * 80))) == {
            "password": "too_long"
        }
        # 39 characters, 74 bytes once encoded
        assert _fields(validate_register(make_register_request(password="Aa1!" + "\u00e9" * 35))) == {
            "password": "too_long"
        }

    def test_phone_pattern(self):
        assert _fields(validate_register(make_register_request(phone="12-34"))) == {"phone": "invalid"}

    def test_date_of_birth_cannot_be_in_the_future(self):
        tomorrow = (date.today() + timedelta(days=2)).isoformat()
        assert _fields(validate_register(make_register_request(date_of_birth=tomorrow))) == {
            "dateOfBirth": "future"
        }
        assert _fields(validate_register(make_register_request(date_of_birth="yesterday"))) == {
            "dateOfBirth": "invalid"
        }

    def test_admin_role_is_not_self_assignable(self):
        assert _fields(validate_register(make_register_request(role="ADMIN"))) == {"role": "invalid"}

    def test_image_constraints(self):
        pdf = ImageUpload(content=b"%PDF", content_type="application/pdf", filename="cv.pdf")
        huge = ImageUpload(content=b"0" * (MAX_IMAGE_BYTES + 1), content_type="image/png", filename="a.png")
        assert _fields(validate_register(make_register_request(image=pdf))) == {"imageProfile": "invalid_type"}
        assert _fields(validate_register(make_register_request(image=huge))) == {"imageProfile": "too_large"}


class TestOtherValidators:
    def test_login_requires_both_fields(self):
        assert _fields(validate_login(LoginRequest(email=None, password=None))) == {
            "email": "required",
            "password": "required",
        }

    def test_login_does_not_apply_strength_rules(self):
        assert validate_login(LoginRequest(email="alice@example.com", password="weak")) == []

    def test_reset_requires_token_and_strong_password(self):
        errors = validate_reset_password(ResetPasswordRequest(token=None, password="weak"))
        assert _fields(errors) == {"token": "required", "password": "too_short"}

    def test_update_profile_allows_empty_request(self):
        assert validate_update_profile(UpdateProfileRequest()) == []

    def test_update_profile_checks_supplied_fields(self):
        errors = validate_update_profile(UpdateProfileRequest(first_name="X", phone="abc"))
        assert _fields(errors) == {"firstName": "too_short", "phone": "invalid"}

    def test_new_password_rules(self):
        errors = validate_new_password(UpdatePasswordRequest(current_password="anything", password="password"))
        assert _fields(errors) == {"password": "weak"}

    def test_reset_and_update_reject_long_passwords(self):
        long_password = "Aa1!" + "x" * 80
        assert _fields(validate_reset_password(ResetPasswordRequest(token="t", password=long_password))) == {
            "password": "too_long"
        }
        assert _fields(
            validate_new_password(UpdatePasswordRequest(current_password="anything", password=long_password))
        ) == {"password": "too_long"}


def test_parse_date_accepts_dates_and_datetimes():
    assert parse_date("1990-04-12") == date(1990, 4, 12)
    assert parse_date("1990-04-12T10:30:00Z") == date(1990, 4, 12)
