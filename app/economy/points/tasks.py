from __future__ import annotations

from dataclasses import dataclass

from app.economy.points.constants import SOURCE_TASK


@dataclass(frozen=True, slots=True)
class TaskReward:
    source: str
    points: int


TASK_CATALOG: dict[str, TaskReward] = {
    # legacy share tasks
    "shareX": TaskReward(source=SOURCE_TASK, points=10),
    "copyLink": TaskReward(source=SOURCE_TASK, points=5),
    "share": TaskReward(source=SOURCE_TASK, points=7),
    "saveApp": TaskReward(source=SOURCE_TASK, points=6),
    "follow": TaskReward(source="social_x", points=15),
    # verified social
    "farcaster": TaskReward(source="social_farcaster", points=25),
    "baseApp": TaskReward(source="social_base_app", points=25),
    "zora": TaskReward(source="social_zora", points=25),
    "x": TaskReward(source="social_x", points=15),
    "discord": TaskReward(source="social_discord", points=15),
    "telegram": TaskReward(source="social_telegram", points=15),
    # honor system
    "github": TaskReward(source="bonus_github", points=10),
    "tiktok": TaskReward(source="bonus_tiktok", points=10),
    "instagram": TaskReward(source="bonus_instagram", points=10),
    "reddit": TaskReward(source="bonus_reddit", points=10),
}


def resolve_task_reward(task_key: str) -> TaskReward | None:
    return TASK_CATALOG.get(task_key.strip())
