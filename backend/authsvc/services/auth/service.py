# authsvc/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from collections.abc import Callable
from functools import cache
from typing import Final

from authsvc.core.config import AuthSettings
from authsvc.core.security import digest_token, hash_password, random_token, verify_password
from authsvc.services._shared.base import BaseService, ServiceContext
from authsvc.services._shared.dto import NewUser, UserRecord
from authsvc.services._shared.errors import (
    ConflictError,
    DeadlineExceededError,
    ForbiddenError,
    InternalServerError,
    InvalidCredentialsError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    PasswordResetExpiredError,
    PasswordResetUsedError,
    StoreError,
    UserExistsError,
    UserNotFoundError,
)
from authsvc.services._shared.ports import (
    REFRESH_TOKEN_TYPE,
    PasswordResetStore,
    RefreshTokenCache,
    SessionStore,
    TokenProvider,
    UserStore,
)
from authsvc.services.auth.dto import (
    LoginIn,
    PasswordResetConfirmIn,
    PasswordResetRequestIn,
    PurgeOut,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserOut,
)
from authsvc.services.auth.validation import require_email, require_name, require_password

log = logging.getLogger(__name__)

RESET_TOKEN_LENGTH: Final[int] = 32

ResetDelivery = Callable[[UserOut, str], None]


@cache
def _dummy_password_hash() -> str:
    # Verified against on unknown emails so both login failure paths pay for one KDF run.
    return hash_password(random_token(RESET_TOKEN_LENGTH))


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / register / refresh / password reset).

    Tokens are issued by a :class:`TokenProvider`. Every issuance writes the
    refresh token to the :class:`RefreshTokenCache` first (the verification
    authority), then records a digest in the :class:`SessionStore` (audit
    trail). If the second write fails, the cache entry is deleted again.
    No transaction spans the two stores.

    Every store error is mapped to a :class:`ServiceError` kind before it
    leaves this class.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        sessions: SessionStore,
        resets: PasswordResetStore,
        refresh_cache: RefreshTokenCache,
        tokens: TokenProvider,
        settings: AuthSettings,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param users: Durable user store.
        :param sessions: Durable session (audit) store.
        :param resets: Durable password-reset store.
        :param refresh_cache: Live refresh token per user.
        :param tokens: Adapter for issuing/verifying JWTs.
        :param settings: Read-only lifetimes and secret.
        :param ctx: Request-scoped context (deadline, request id).
        """
        super().__init__(ctx=ctx)
        self.users = users
        self.sessions = sessions
        self.resets = resets
        self.refresh_cache = refresh_cache
        self.tokens = tokens
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email, inactive account and wrong password all raise the same
        :class:`InvalidCredentialsError`.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises InvalidInputError: Malformed email or password.
        :raises InvalidCredentialsError: Authentication failed.
        :raises InternalServerError: Store or deadline failure.
        """
        email = require_email(dto.email)
        require_password(dto.password)

        self.ensure_deadline("get_user_by_email")
        try:
            user = self.users.get_user_by_email(email)
        except NotFoundError:
            verify_password(dto.password, _dummy_password_hash())
            log.info("login.failed", extra={"event": "login", "reason": "unknown_email"})
            raise InvalidCredentialsError() from None
        except StoreError as exc:
            raise self._internal("get_user_by_email", exc) from exc

        if not user.is_active:
            log.info("login.failed", extra={"event": "login", "user_id": user.id})
            raise InvalidCredentialsError()

        if not verify_password(dto.password, user.password_hash):
            log.info("login.failed", extra={"event": "login", "user_id": user.id})
            raise InvalidCredentialsError()

        pair = self._issue_session(user.id)
        log.info("login.succeeded", extra={"event": "login", "user_id": user.id})
        return pair

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Create an active user.

        The existence lookup is an early exit only; concurrent registrations
        are settled by the store's unique email constraint, which also maps to
        :class:`UserExistsError`.

        :raises InvalidInputError: Malformed name, email or password.
        :raises UserExistsError: Email already registered.
        :raises InternalServerError: Hashing, store or deadline failure.
        """
        name = require_name(dto.name)
        email = require_email(dto.email)
        require_password(dto.password)

        self.ensure_deadline("get_user_by_email")
        try:
            self.users.get_user_by_email(email)
        except NotFoundError:
            pass
        except StoreError as exc:
            raise self._internal("get_user_by_email", exc) from exc
        else:
            raise UserExistsError()

        try:
            password_hash = hash_password(dto.password)
        except ValueError as exc:
            raise self._internal("hash_password", exc) from exc

        self.ensure_deadline("create_user")
        try:
            user = self.users.create_user(
                NewUser(email=email, name=name, password_hash=password_hash)
            )
        except ConflictError:
            raise UserExistsError() from None
        except StoreError as exc:
            raise self._internal("create_user", exc) from exc

        log.info("user.registered", extra={"event": "register", "user_id": user.id})
        return UserOut.from_record(user)

    # ------------------------------------------------------------------ #
    # Refresh (rotation)
    # ------------------------------------------------------------------ #

    def refresh_tokens(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange the live refresh token for a new pair.

        The presented token must equal the cached one byte for byte; any token
        superseded by a later login or refresh is rejected even though its
        signature still verifies. Expiry is checked before the cache is read.

        Two concurrent calls with the same live token can both pass the
        equality check; the later cache write wins.

        :raises InvalidInputError: Empty token.
        :raises InvalidTokenError: Bad signature/type/expiry, or cache mismatch.
        :raises UserNotFoundError: The account no longer exists.
        :raises ForbiddenError: The account is disabled.
        :raises InternalServerError: Store or deadline failure.
        """
        presented = dto.refresh_token
        if not presented:
            raise InvalidInputError("Refresh token is required", details={"field": "refresh_token"})

        claims = self.tokens.decode(presented, REFRESH_TOKEN_TYPE)
        user_id = claims.user_id

        self.ensure_deadline("get_refresh_token")
        try:
            cached = self.refresh_cache.get_refresh_token(user_id)
        except NotFoundError:
            log.info("refresh.rejected", extra={"event": "refresh", "user_id": user_id})
            raise InvalidTokenError() from None
        except StoreError:
            log.error(
                "refresh.cache_lookup_failed",
                extra={"event": "refresh", "user_id": user_id},
                exc_info=True,
            )
            raise InvalidTokenError() from None

        if not hmac.compare_digest(cached.encode("utf-8"), presented.encode("utf-8")):
            log.warning("refresh.superseded_token", extra={"event": "refresh", "user_id": user_id})
            raise InvalidTokenError()

        user = self._load_user(user_id)
        if not user.is_active:
            raise ForbiddenError()

        pair = self._issue_session(user.id)
        log.info("refresh.succeeded", extra={"event": "refresh", "user_id": user.id})
        return pair

    # ------------------------------------------------------------------ #
    # Password reset
    # ------------------------------------------------------------------ #

    def request_password_reset(
        self,
        dto: PasswordResetRequestIn,
        *,
        deliver: ResetDelivery | None = None,
    ) -> None:
        """
        Issue a one-time reset token valid for ``settings.reset_expires``.

        Returns ``None`` whether or not the account exists or is active. The
        raw token only leaves through ``deliver``; the store keeps its digest.

        :param deliver: Called with the user and raw token after persistence.
            Its failures are logged and do not change the outcome.
        :raises InvalidInputError: Malformed email.
        :raises InternalServerError: Token generation, store or deadline failure.
        """
        email = require_email(dto.email)

        self.ensure_deadline("get_user_by_email")
        try:
            user = self.users.get_user_by_email(email)
        except NotFoundError:
            log.debug("password_reset.unknown_email", extra={"event": "password_reset"})
            return None
        except StoreError as exc:
            raise self._internal("get_user_by_email", exc) from exc

        if not user.is_active:
            log.debug(
                "password_reset.inactive_user",
                extra={"event": "password_reset", "user_id": user.id},
            )
            return None

        try:
            token = random_token(RESET_TOKEN_LENGTH)
        except (OSError, NotImplementedError) as exc:
            raise self._internal("random_token", exc) from exc

        self.ensure_deadline("create_password_reset")
        try:
            reset = self.resets.create_password_reset(
                user.id,
                digest_token(token),
                self.now_utc() + self.settings.reset_expires,
            )
        except StoreError as exc:
            raise self._internal("create_password_reset", exc) from exc

        log.info(
            "password_reset.requested",
            extra={"event": "password_reset", "user_id": user.id, "reset_id": reset.id},
        )

        if callable(deliver):
            try:
                deliver(UserOut.from_record(user), token)
            except Exception:
                log.error(
                    "password_reset.delivery_failed",
                    extra={"event": "password_reset", "reset_id": reset.id},
                    exc_info=True,
                )
        return None

    def confirm_password_reset(self, dto: PasswordResetConfirmIn) -> None:
        """
        Consume a reset token and set a new password.

        The reset is marked used before the password changes, so two
        concurrent confirmations cannot both succeed. All cached refresh
        tokens of the user are revoked afterwards.

        :raises InvalidInputError: Empty token or malformed new password.
        :raises InvalidTokenError: Unknown token.
        :raises PasswordResetUsedError: Token already consumed.
        :raises PasswordResetExpiredError: Token past its expiry.
        :raises UserNotFoundError: The account no longer exists.
        :raises InternalServerError: Hashing, store or deadline failure.
        """
        token = dto.token.strip() if isinstance(dto.token, str) else ""
        if not token:
            raise InvalidInputError("Reset token is required", details={"field": "token"})
        require_password(dto.new_password, field="new_password")

        self.ensure_deadline("get_password_reset_by_token")
        try:
            reset = self.resets.get_password_reset_by_token(digest_token(token))
        except NotFoundError:
            raise InvalidTokenError() from None
        except StoreError as exc:
            raise self._internal("get_password_reset_by_token", exc) from exc

        if reset.used:
            raise PasswordResetUsedError()
        if reset.expires_at <= self.now_utc():
            raise PasswordResetExpiredError()

        user = self._load_user(reset.user_id)

        try:
            password_hash = hash_password(dto.new_password)
        except ValueError as exc:
            raise self._internal("hash_password", exc) from exc

        self.ensure_deadline("mark_password_reset_as_used")
        try:
            self.resets.mark_password_reset_as_used(reset.id)
        except ConflictError:
            raise PasswordResetUsedError() from None
        except StoreError as exc:
            raise self._internal("mark_password_reset_as_used", exc) from exc

        self.ensure_deadline("update_password")
        try:
            self.users.update_password(user.id, password_hash)
        except NotFoundError:
            raise UserNotFoundError() from None
        except StoreError as exc:
            raise self._internal("update_password", exc) from exc

        try:
            self.refresh_cache.delete_all_user_refresh_tokens(user.id)
        except StoreError:
            log.error(
                "password_reset.revoke_failed",
                extra={"event": "password_reset", "user_id": user.id},
                exc_info=True,
            )

        log.info(
            "password_reset.completed",
            extra={"event": "password_reset", "user_id": user.id, "reset_id": reset.id},
        )

    # ------------------------------------------------------------------ #
    # Queries & maintenance
    # ------------------------------------------------------------------ #

    def get_current_user(self, user_id: str) -> UserOut:
        """
        Return the authenticated user's public view.

        :raises UserNotFoundError: Unknown id.
        :raises ForbiddenError: Account disabled.
        """
        user = self._load_user(user_id)
        if not user.is_active:
            raise ForbiddenError()
        return UserOut.from_record(user)

    def purge_expired(self) -> PurgeOut:
        """Delete expired sessions and password resets."""
        try:
            sessions = self.sessions.delete_expired_sessions()
            resets = self.resets.delete_expired_password_resets()
        except StoreError as exc:
            raise self._internal("purge_expired", exc) from exc
        log.info(
            "purge.completed",
            extra={"event": "purge", "sessions": sessions, "password_resets": resets},
        )
        return PurgeOut(sessions=sessions, password_resets=resets)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _load_user(self, user_id: str) -> UserRecord:
        self.ensure_deadline("get_user_by_id")
        try:
            return self.users.get_user_by_id(user_id)
        except NotFoundError:
            raise UserNotFoundError() from None
        except StoreError as exc:
            raise self._internal("get_user_by_id", exc) from exc

    def _issue_session(self, user_id: str) -> TokenPairOut:
        """
        Mint a pair, write the cache, then record the session digest.

        A failure after the cache write deletes the cache entry again before
        the error is raised (this also covers a deadline that expires between
        the two writes).
        """
        access = self.tokens.create_access_token(user_id)
        refresh = self.tokens.create_refresh_token(user_id)

        self.ensure_deadline("set_refresh_token")
        try:
            self.refresh_cache.set_refresh_token(user_id, refresh, self.settings.refresh_expires)
        except StoreError as exc:
            raise self._internal("set_refresh_token", exc) from exc

        try:
            self.ensure_deadline("create_session")
            session = self.sessions.create_session(
                user_id,
                digest_token(refresh),
                self.now_utc() + self.settings.refresh_expires,
            )
        except (StoreError, DeadlineExceededError) as exc:
            log.error(
                "session.create_failed",
                extra={"event": "session", "user_id": user_id},
                exc_info=True,
            )
            self._compensate_cache_write(user_id)
            if isinstance(exc, DeadlineExceededError):
                raise
            raise InternalServerError() from exc

        log.debug(
            "session.created",
            extra={"event": "session", "user_id": user_id, "session_id": session.id},
        )
        return TokenPairOut(
            access_token=access,
            refresh_token=refresh,
            expires_in=int(self.settings.access_expires.total_seconds()),
        )

    def _compensate_cache_write(self, user_id: str) -> None:
        try:
            self.refresh_cache.delete_refresh_token(user_id)
        except StoreError:
            log.error(
                "session.compensation_failed",
                extra={"event": "session", "user_id": user_id},
                exc_info=True,
            )

    @staticmethod
    def _internal(step: str, exc: BaseException) -> InternalServerError:
        log.error("auth.store_failure step=%s", step, exc_info=exc)
        return InternalServerError()
