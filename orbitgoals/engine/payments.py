"""Manual premium payments: QR transfer verified by an admin.

A request moves pending -> approved | rejected exactly once. A user with a
pending request cannot open another: a second submit returns the existing
request. Without a usable remote store, submissions are kept locally (demo
mode) and admin operations report the backend as unavailable.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from orbitgoals.engine import remote_store
from orbitgoals.engine.buckets import monthly_bucket
from orbitgoals.engine.errors import (
    BackendUnavailableError,
    OrbitError,
    PaymentNotFoundError,
    PaymentStateError,
)
from orbitgoals.engine.local_store import LocalStore, UserState
from orbitgoals.engine.models import AdminStats, Identity, PaymentRequest, PaymentStatus
from orbitgoals.engine.sync import RemoteSyncAdapter

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, sync: RemoteSyncAdapter, store: LocalStore, amount: int = 30) -> None:
        self.sync = sync
        self.store = store
        self.amount = amount

    def _new_request(self, user: Identity) -> PaymentRequest:
        return PaymentRequest(
            user_id=user.id,
            user_name=user.name,
            user_email=user.email,
            amount=self.amount,
        )

    def _submit_local(self, user: Identity) -> PaymentRequest:
        state = UserState(self.store, user.id)
        requests = state.payment_requests()
        for raw in requests:
            if raw.get("status") == PaymentStatus.pending.value:
                return PaymentRequest.model_validate(raw)
        request = self._new_request(user)
        state.set_payment_requests([*requests, request.model_dump(mode="json")])
        logger.info("Payment request %s recorded locally (demo mode)", request.id)
        return request

    async def submit(self, user: Identity) -> PaymentRequest:
        if not self.sync.remote_enabled(user.id):
            return self._submit_local(user)
        try:
            async with self.sync.session_factory() as session:
                existing = await remote_store.find_pending_payment(session, user.id)
                if existing is not None:
                    return PaymentRequest.model_validate(existing)
                request = self._new_request(user)
                await remote_store.insert_payment(
                    session, {**request.model_dump(), "status": request.status.value}
                )
                await session.commit()
        except Exception as exc:
            self.sync.absorb(exc, "payment submit")
            return self._submit_local(user)
        logger.info("Payment request %s submitted by %s", request.id, user.id)
        return request

    async def list_requests(self) -> list[PaymentRequest]:
        """All requests, newest first. Empty when the backend is unavailable."""
        if not self.sync.remote_enabled(allow_anonymous=True):
            return []
        try:
            async with self.sync.session_factory() as session:
                rows = await remote_store.list_payments(session)
        except Exception as exc:
            self.sync.absorb(exc, "payment list")
            return []
        return [PaymentRequest.model_validate(r) for r in rows]

    async def _transition(self, request_id: str, status: PaymentStatus) -> PaymentRequest:
        if not self.sync.remote_enabled(allow_anonymous=True):
            raise BackendUnavailableError("Payment backend unavailable")
        try:
            async with self.sync.session_factory() as session:
                row = await remote_store.get_payment(session, request_id)
                if row is None:
                    raise PaymentNotFoundError(request_id)
                request = PaymentRequest.model_validate(row)
                if request.status != PaymentStatus.pending:
                    raise PaymentStateError(f"Request {request_id} is already {request.status.value}")
                await remote_store.update_payment_status(session, request_id, status.value)
                if status == PaymentStatus.approved:
                    await remote_store.set_user_pro(session, request.user_id, datetime.now(timezone.utc))
                await session.commit()
        except OrbitError:
            raise
        except Exception as exc:
            self.sync.absorb(exc, f"payment {status.value}")
            raise BackendUnavailableError("Payment backend unavailable")

        if status == PaymentStatus.approved:
            UserState(self.store, request.user_id).set_pro(True)
        logger.info("Payment request %s %s", request_id, status.value)
        return request.model_copy(update={"status": status})

    async def approve(self, request_id: str) -> PaymentRequest:
        return await self._transition(request_id, PaymentStatus.approved)

    async def reject(self, request_id: str) -> PaymentRequest:
        return await self._transition(request_id, PaymentStatus.rejected)

    async def admin_stats(self) -> AdminStats:
        if not self.sync.remote_enabled(allow_anonymous=True):
            return AdminStats()
        total_users = active_subs = 0
        try:
            async with self.sync.session_factory() as session:
                total_users = await remote_store.count_bucket_users(session, monthly_bucket(self.sync.today()))
                active_subs = await remote_store.count_payments(session, PaymentStatus.approved.value)
        except Exception as exc:
            self.sync.absorb(exc, "admin stats")
        return AdminStats(total_users=total_users, revenue=active_subs * self.amount, active_subs=active_subs)

    async def check_pro(self, user: Identity) -> bool:
        """Remote pro flag mirrored into local state; local flag when offline."""
        state = UserState(self.store, user.id)
        if state.is_pro() or not self.sync.remote_enabled(user.id):
            return state.is_pro()
        try:
            async with self.sync.session_factory() as session:
                is_pro = await remote_store.fetch_is_pro(session, user.id)
        except Exception as exc:
            self.sync.absorb(exc, "pro status")
            return False
        if is_pro:
            state.set_pro(True)
        return is_pro
