"""Points ledger: lifetime vs. spendable points, rewards, and punishments."""

from __future__ import annotations

from typing import Any

from core.leveling import calculate_level
from core.models import (
    TRIGGER_CONDITIONS,
    PointsTransaction,
    Punishment,
    Reward,
    UserLevel,
    _int,
    new_id,
)
from core.storage import PersistentStore, persists, records


MAX_TRANSACTIONS = 500


class PointsLedger(PersistentStore):
    """total_points only ever grows; current_points is the spendable balance.

    redeem_reward is the only operation that can refuse (insufficient
    balance); deductions clamp at zero instead of failing.
    """

    key = "points"

    def restore(self, data: dict[str, Any]) -> None:
        self.total_points = max(0, _int(data.get("totalPoints")))
        self.current_points = max(0, _int(data.get("currentPoints")))
        self.rewards = [Reward.from_dict(r) for r in records(data, "rewards")]
        self.punishments = [Punishment.from_dict(p) for p in records(data, "punishments")]
        self.transactions = [PointsTransaction.from_dict(t) for t in records(data, "transactions")]
        self.updated_at = str(data.get("updatedAt", ""))

    def snapshot(self) -> dict[str, Any]:
        return {
            "totalPoints": self.total_points,
            "currentPoints": self.current_points,
            "rewards": [r.to_dict() for r in self.rewards],
            "punishments": [p.to_dict() for p in self.punishments],
            "transactions": [t.to_dict() for t in self.transactions],
            "updatedAt": self.updated_at,
        }

    def _record(self, amount: int, tx_type: str, source_id: str | None, description: str) -> None:
        now = self._now()
        self.transactions.append(
            PointsTransaction(
                id=new_id(),
                amount=amount,
                type=tx_type,
                source_id=source_id,
                description=description,
                created_at=now,
            )
        )
        del self.transactions[:-MAX_TRANSACTIONS]
        self.updated_at = now

    # ── Balance ───────────────────────────────────────────────

    @persists
    def add_points(
        self,
        amount: int,
        tx_type: str = "manual",
        source_id: str | None = None,
        description: str = "",
    ) -> None:
        if amount <= 0:
            return
        self.total_points += amount
        self.current_points += amount
        self._record(amount, tx_type, source_id, description)

    @persists
    def deduct_points(
        self,
        amount: int,
        tx_type: str = "punishment",
        source_id: str | None = None,
        description: str = "",
    ) -> None:
        if amount <= 0:
            return
        taken = min(amount, self.current_points)
        self.current_points -= taken
        self._record(-taken, tx_type, source_id, description)

    def get_user_level(self) -> UserLevel:
        return calculate_level(self.total_points)

    def recent_transactions(self, limit: int = 20) -> list[PointsTransaction]:
        return list(reversed(self.transactions[-limit:])) if limit > 0 else []

    # ── Rewards ───────────────────────────────────────────────

    @persists
    def add_reward(
        self,
        name: str,
        cost: int,
        icon: str = "",
        category: str = "",
        description: str = "",
    ) -> Reward:
        reward = Reward(
            id=new_id(),
            name=name,
            description=description,
            icon=icon,
            cost=max(0, int(cost)),
            category=category,
            created_at=self._now(),
        )
        self.rewards.append(reward)
        self.updated_at = reward.created_at
        return reward

    def get_reward(self, reward_id: str) -> Reward | None:
        for r in self.rewards:
            if r.id == reward_id:
                return r
        return None

    @persists
    def remove_reward(self, reward_id: str) -> bool:
        before = len(self.rewards)
        self.rewards = [r for r in self.rewards if r.id != reward_id]
        if len(self.rewards) == before:
            return False
        self.updated_at = self._now()
        return True

    @persists
    def redeem_reward(self, reward_id: str) -> bool:
        """Spend a reward's cost. False (and no change) if unknown or unaffordable."""
        reward = self.get_reward(reward_id)
        if reward is None or self.current_points < reward.cost:
            return False
        self.current_points -= reward.cost
        reward.times_redeemed += 1
        self._record(-reward.cost, "reward_redeem", reward.id, reward.name)
        return True

    # ── Punishments ───────────────────────────────────────────

    @persists
    def add_punishment(
        self,
        name: str,
        points_penalty: int,
        trigger_condition: str = "task_incomplete",
        icon: str = "",
        description: str = "",
    ) -> Punishment:
        if trigger_condition not in TRIGGER_CONDITIONS:
            raise ValueError(f"Invalid trigger condition: {trigger_condition!r}")
        punishment = Punishment(
            id=new_id(),
            name=name,
            description=description,
            icon=icon,
            trigger_condition=trigger_condition,
            points_penalty=max(0, int(points_penalty)),
            created_at=self._now(),
        )
        self.punishments.append(punishment)
        self.updated_at = punishment.created_at
        return punishment

    def get_punishment(self, punishment_id: str) -> Punishment | None:
        for p in self.punishments:
            if p.id == punishment_id:
                return p
        return None

    @persists
    def remove_punishment(self, punishment_id: str) -> bool:
        before = len(self.punishments)
        self.punishments = [p for p in self.punishments if p.id != punishment_id]
        if len(self.punishments) == before:
            return False
        self.updated_at = self._now()
        return True

    @persists
    def apply_punishment(self, punishment_id: str) -> bool:
        """Deduct a punishment's penalty (clamped at zero). False if unknown or inactive."""
        punishment = self.get_punishment(punishment_id)
        if punishment is None or not punishment.is_active:
            return False
        self.deduct_points(punishment.points_penalty, "punishment", punishment.id, punishment.name)
        return True
