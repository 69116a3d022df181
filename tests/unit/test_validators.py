"""Tests for contact form validators and spam scoring"""
import pytest

from contactme.core.results import ContactSubmission, ValidationResult
from contactme.core.sanitizers import sanitize_contact_form
from contactme.core.validators import (
    SPAM_KEYWORDS,
    SPAM_THRESHOLD,
    as_integer,
    check_spam,
    validate_contact_form,
    validate_email,
    validate_message,
    validate_name,
    validate_object_id,
    validate_pagination,
    validate_phone,
    validate_priority,
    validate_status,
    validate_subject,
)


class TestValidateEmail:
    """Tests for validate_email"""

    def test_valid(self):
        assert validate_email("jane@example.com") == ValidationResult(True, "Valid email")

    @pytest.mark.parametrize("value", [None, "", 12])
    def test_required(self, value):
        result = validate_email(value)
        assert result.is_valid is False
        assert result.message == "Email is required"

    @pytest.mark.parametrize("value", ["plainaddress", "jane@", "@example.com", "jane@localhost", "a b@example.com"])
    def test_invalid_format(self, value):
        result = validate_email(value)
        assert result.is_valid is False
        assert result.message == "Please provide a valid email address"

    @pytest.mark.parametrize(
        "value",
        ["jane@site.test", "jane@mail.local", "jane@host.localhost.test", "jane@svc.internal.invalid"],
    )
    def test_reserved_domains_with_dot_are_valid(self, value):
        assert validate_email(value).is_valid is True

    @pytest.mark.parametrize("value", ["jane@example", "jane@test"])
    def test_domain_without_dot(self, value):
        assert validate_email(value).message == "Please provide a valid email address"


class TestValidatePhone:
    """Tests for validate_phone"""

    def test_optional_when_absent(self):
        assert validate_phone(None).is_valid is True
        assert validate_phone("").is_valid is True

    def test_required_when_absent(self):
        result = validate_phone(None, required=True)
        assert result.is_valid is False
        assert result.message == "Phone number is required"

    @pytest.mark.parametrize("value", ["555-123-4567", "+1 (555) 123-4567", "123456789012345"])
    def test_valid_lengths(self, value):
        assert validate_phone(value).is_valid is True

    @pytest.mark.parametrize("value", ["555-1234", "1234567890123456", "phone"])
    def test_invalid_lengths(self, value):
        result = validate_phone(value)
        assert result.is_valid is False
        assert result.message == "Phone number must be between 10-15 digits"


class TestValidateName:
    """Tests for validate_name"""

    def test_two_characters_is_valid(self):
        assert validate_name("Al").is_valid is True

    def test_one_character_is_too_short(self):
        result = validate_name("A")
        assert result.is_valid is False
        assert result.message == "Name must be at least 2 characters long"

    def test_fifty_characters_is_valid(self):
        assert validate_name("A" * 50).is_valid is True

    def test_fifty_one_characters_is_too_long(self):
        result = validate_name("A" * 51)
        assert result.is_valid is False
        assert result.message == "Name cannot exceed 50 characters"

    def test_length_measured_after_trim(self):
        assert validate_name("   A   ").is_valid is False

    @pytest.mark.parametrize("value", ["Jane Doe", "Mary-Jane", "O'Brien"])
    def test_allowed_characters(self, value):
        assert validate_name(value).is_valid is True

    @pytest.mark.parametrize("value", ["Jane2", "Jane_Doe", "José", "Jane!"])
    def test_invalid_characters(self, value):
        result = validate_name(value, "First name")
        assert result.is_valid is False
        assert result.message == "First name contains invalid characters"

    def test_required_uses_field_name(self):
        assert validate_name(None, "Last name").message == "Last name is required"

    def test_valid_message_uses_field_name(self):
        assert validate_name("Jane", "First name").message == "Valid first name"


class TestValidateSubjectAndMessage:
    """Tests for validate_subject / validate_message"""

    def test_subject_bounds(self):
        assert validate_subject("Hello").is_valid is True
        assert validate_subject("Hey").message == "Subject must be at least 5 characters long"
        assert validate_subject("x" * 100).is_valid is True
        assert validate_subject("x" * 101).message == "Subject cannot exceed 100 characters"

    def test_subject_required(self):
        assert validate_subject("").message == "Subject is required"

    def test_message_bounds(self):
        assert validate_message("0123456789").is_valid is True
        assert validate_message("too short").message == "Message must be at least 10 characters long"
        assert validate_message("m" * 1000).is_valid is True
        assert validate_message("m" * 1001).message == "Message cannot exceed 1000 characters"

    def test_message_required(self):
        assert validate_message(None).message == "Message is required"


class TestValidateStatusAndPriority:
    """Tests for validate_status / validate_priority"""

    @pytest.mark.parametrize("value", ["new", "read", "replied", "archived"])
    def test_valid_statuses(self, value):
        assert validate_status(value).is_valid is True

    def test_status_required(self):
        assert validate_status(None).message == "Status is required"

    def test_unknown_status(self):
        result = validate_status("closed")
        assert result.is_valid is False
        assert result.message == "Status must be one of: new, read, replied, archived"

    def test_priority_optional(self):
        assert validate_priority(None).is_valid is True

    @pytest.mark.parametrize("value", ["low", "medium", "high"])
    def test_valid_priorities(self, value):
        assert validate_priority(value).is_valid is True

    def test_unknown_priority(self):
        result = validate_priority("urgent")
        assert result.is_valid is False
        assert result.message == "Priority must be one of: low, medium, high"


class TestValidateObjectId:
    def test_valid(self):
        assert validate_object_id("65a1f0c2e4b0a1b2c3d4e5f6").is_valid is True

    def test_required(self):
        assert validate_object_id("").message == "ID is required"

    @pytest.mark.parametrize("value", ["123", "zzzzzzzzzzzzzzzzzzzzzzzz", "65a1f0c2e4b0a1b2c3d4e5f6a"])
    def test_invalid_format(self, value):
        assert validate_object_id(value).message == "Invalid ID format"


class TestValidatePagination:
    """Tests for validate_pagination"""

    def test_absent_is_valid(self):
        assert validate_pagination().is_valid is True

    @pytest.mark.parametrize("page,limit", [(1, 10), ("2", "100"), ("3", None), (None, 1)])
    def test_valid(self, page, limit):
        assert validate_pagination(page, limit).is_valid is True

    @pytest.mark.parametrize("page", [0, "0", -1, "abc", "1.5", True])
    def test_invalid_page(self, page):
        result = validate_pagination(page, None)
        assert result.is_valid is False
        assert result.message == "Page must be a positive integer"

    @pytest.mark.parametrize("limit", [0, "101", "ten"])
    def test_invalid_limit(self, limit):
        result = validate_pagination(None, limit)
        assert result.message == "Limit must be a positive integer between 1 and 100"

    def test_both_invalid_messages_joined(self):
        result = validate_pagination("x", "500")
        assert result.message == (
            "Page must be a positive integer, "
            "Limit must be a positive integer between 1 and 100"
        )

    def test_large_page_keeps_precision(self):
        assert validate_pagination("99999999999999999999", "10").is_valid is True
        assert as_integer("99999999999999999999") == 99999999999999999999

    @pytest.mark.parametrize("value,expected", [("7", 7), (" 8 ", 8), ("3.0", 3), (4.0, 4), ("1.5", None), ("nan", None)])
    def test_as_integer(self, value, expected):
        assert as_integer(value) == expected


class TestCheckSpam:
    """Tests for check_spam"""

    def test_clean_content(self):
        result = check_spam({"subject": "Hello", "message": "Just saying hi", "email": "a@example.com"})
        assert result.score == 0
        assert result.is_spam is False
        assert result.message == "Content appears legitimate"

    def test_keyword_and_link_reach_threshold(self):
        result = check_spam({"subject": "Visit", "message": "Best casino at http://example.com"})
        assert result.score == 3
        assert result.is_spam is True
        assert result.message == "Content flagged as potential spam"

    def test_repeated_keyword_counts_each_occurrence(self):
        result = check_spam({"message": "bitcoin bitcoin https://coins.example"})
        assert result.score == 4

    def test_case_insensitive(self):
        assert check_spam({"subject": "URGENT: Act Now"}).score == 2

    def test_substring_matches_inside_words(self):
        assert check_spam({"message": "immediately"}).score == 1

    def test_email_is_scanned(self):
        assert check_spam({"email": "lottery-winner@example.com"}).score == 2

    def test_below_threshold(self):
        result = check_spam({"message": "urgent and immediate"})
        assert result.score == SPAM_THRESHOLD - 1
        assert result.is_spam is False

    def test_accepts_submission(self):
        submission = ContactSubmission(message="free money, click here, act now")
        assert check_spam(submission).is_spam is True

    def test_non_text_fields_ignored(self):
        assert check_spam({"subject": None, "message": 42}).score == 0

    def test_keyword_list(self):
        assert len(SPAM_KEYWORDS) == 19
        assert "casino" in SPAM_KEYWORDS

    def test_deterministic(self):
        data = {"message": "casino lottery http://x"}
        assert check_spam(data) == check_spam(data)


class TestValidateContactForm:
    """Tests for validate_contact_form"""

    def test_sanitized_example_is_valid(self, valid_form):
        result = validate_contact_form(sanitize_contact_form(valid_form))

        assert result.is_valid is True
        assert result.errors == []
        assert result.spam_check.is_spam is False

    def test_error_order_follows_fields(self):
        result = validate_contact_form({
            "firstName": "Jane",
            "lastName": "Doe",
            "subject": "Hello there",
        })
        assert result.is_valid is False
        assert result.errors == ["Email is required", "Message is required"]

    def test_every_failure_collected(self):
        result = validate_contact_form({"phone": "123"})
        assert result.errors == [
            "First name is required",
            "Last name is required",
            "Email is required",
            "Subject is required",
            "Message is required",
            "Phone number must be between 10-15 digits",
        ]

    def test_phone_checked_only_when_present(self, valid_form):
        valid_form.pop("phone")
        assert validate_contact_form(valid_form).is_valid is True

    def test_spam_does_not_invalidate(self, valid_form):
        valid_form["message"] = "Win at the casino: http://spam.example"
        result = validate_contact_form(valid_form)
        assert result.is_valid is True
        assert result.spam_check.is_spam is True

    def test_spam_attached_when_invalid(self):
        result = validate_contact_form({"message": "casino casino casino"})
        assert result.is_valid is False
        assert result.spam_check.score == 3

    def test_to_dict(self, valid_form):
        data = validate_contact_form(valid_form).to_dict()
        assert data == {
            "isValid": True,
            "errors": [],
            "spamCheck": {"isSpam": False, "score": 0, "message": "Content appears legitimate"},
        }

    def test_non_mapping(self):
        assert validate_contact_form(None).is_valid is False
