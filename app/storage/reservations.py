from enum import Enum
from redis.asyncio import Redis
from redis.exceptions import WatchError
from ..models import Reservation, ReservationStatus

class UpsertOutcome(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    STATUS_UPDATED = "STATUS_UPDATED"
    SKIPPED = "SKIPPED"

class ReservationRepo:
    """Reservation store keyed by ``reservation_id``.

    ``upsert`` runs its read-decide-write under WATCH/MULTI, so concurrent
    writers on the same key retry instead of overwriting each other.
    """

    def __init__(self, r: Redis):
        self.r = r

    def _key(self, reservation_id: str) -> str:
        return f"reservation:{reservation_id}"

    async def get(self, reservation_id: str) -> Reservation | None:
        data = await self.r.hgetall(self._key(reservation_id))
        if not data:
            return None
        return Reservation(reservation_id=reservation_id,
                           guest_name=data["guest_name"],
                           status=ReservationStatus(data["status"]),
                           check_in_date=data["check_in_date"],
                           check_out_date=data["check_out_date"])

    async def upsert(self, reservation: Reservation) -> UpsertOutcome:
        key = self._key(reservation.reservation_id)
        async with self.r.pipeline(transaction=True) as pipe:
            while True:
                try:
                    await pipe.watch(key)
                    exists = await pipe.exists(key)
                    outcome, mapping = self._plan(bool(exists), reservation)
                    if mapping:
                        pipe.multi()
                        pipe.hset(key, mapping=mapping)
                        await pipe.execute()
                    return outcome
                except WatchError:
                    continue

    @staticmethod
    def _plan(exists: bool, reservation: Reservation) -> tuple[UpsertOutcome, dict]:
        terminal = reservation.status.is_terminal
        if exists and terminal:
            # history is frozen once a reservation is finalized
            return UpsertOutcome.STATUS_UPDATED, {"status": reservation.status.value}
        if exists:
            return UpsertOutcome.UPDATED, ReservationRepo._fields(reservation)
        if terminal:
            return UpsertOutcome.SKIPPED, {}
        return UpsertOutcome.CREATED, ReservationRepo._fields(reservation)

    @staticmethod
    def _fields(reservation: Reservation) -> dict:
        return {
            "guest_name": reservation.guest_name,
            "status": reservation.status.value,
            "check_in_date": reservation.check_in_date,
            "check_out_date": reservation.check_out_date,
        }
