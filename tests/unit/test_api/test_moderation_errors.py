"""Tests for the moderation error translation context manager."""

import pytest
from fastapi import HTTPException

from studybuddy_api.api.errors import moderation_errors
from studybuddy_api.lib.moderation import InvalidOperationError, NotFoundError


class TestModerationErrors:
    def test_passes_through_on_success(self) -> None:
        with moderation_errors("banning account"):
            value = 1
        assert value == 1

    def test_not_found_is_404(self) -> None:
        with pytest.raises(HTTPException) as exc_info, moderation_errors("banning account"):
            raise NotFoundError("User", 3)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "User 3 not found"

    def test_invalid_operation_is_400(self) -> None:
        with pytest.raises(HTTPException) as exc_info, moderation_errors("banning account"):
            raise InvalidOperationError("Cannot ban your own account")
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Cannot ban your own account"

    def test_unexpected_error_is_500(self) -> None:
        with pytest.raises(HTTPException) as exc_info, moderation_errors("banning account"):
            raise RuntimeError("connection reset")
        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Internal server error during banning account."

    def test_http_exception_untouched(self) -> None:
        with pytest.raises(HTTPException) as exc_info, moderation_errors("banning account"):
            raise HTTPException(status_code=409, detail="conflict")
        assert exc_info.value.status_code == 409
