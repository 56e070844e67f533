"""
Run configuration: validated once, before any match is simulated.
"""
from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from tennis_sim.simulation.schemas import MatchConfig, Player


class PlayerConfig(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    serve_win_prob: float = Field(..., ge=0.0, le=1.0)
    ace_prob: float = Field(default=0.0, ge=0.0, le=1.0)
    double_fault_prob: float = Field(default=0.0, ge=0.0, le=1.0)

    def to_player(self) -> Player:
        return Player(
            name=self.name,
            serve_win_prob=self.serve_win_prob,
            ace_prob=self.ace_prob,
            double_fault_prob=self.double_fault_prob,
        )


DEFAULT_PLAYER1 = PlayerConfig(name="Federer", serve_win_prob=0.65, ace_prob=0.10, double_fault_prob=0.05)
DEFAULT_PLAYER2 = PlayerConfig(name="Nadal", serve_win_prob=0.62, ace_prob=0.08, double_fault_prob=0.04)


class RunConfig(BaseModel):
    num_simulations: int = Field(default=10000, gt=0)
    best_of: int = Field(default=5, ge=1, description="Odd number of sets, e.g. 3 or 5")
    grand_slam: bool = Field(default=True, description="10-point tiebreak in the deciding set")
    batch_size: int = Field(default=10, gt=0, description="Must divide num_simulations")
    log_interval: int = Field(default=10000, gt=0, description="Flush the point log whenever cumulative matches is a multiple of this")
    max_workers: int = Field(default=10, gt=0)
    use_processes: bool = Field(default=True, description="Run batches in worker processes; False uses threads")
    save_logs: bool = True
    log_path: str = "match_log_parallel.csv"
    seed: int | None = Field(default=None, description="Optional; batches derive seed + batch index")
    player1: PlayerConfig = Field(default_factory=DEFAULT_PLAYER1.model_copy)
    player2: PlayerConfig = Field(default_factory=DEFAULT_PLAYER2.model_copy)

    @model_validator(mode="after")
    def _check_consistency(self) -> RunConfig:
        if self.best_of % 2 == 0:
            raise ValueError(f"best_of must be odd (got {self.best_of})")
        if self.num_simulations % self.batch_size != 0:
            raise ValueError(
                f"batch_size {self.batch_size} does not divide num_simulations {self.num_simulations}"
            )
        if self.player1.name == self.player2.name:
            raise ValueError("player1 and player2 must have different names")
        return self

    def match_config(self) -> MatchConfig:
        return MatchConfig(
            player1=self.player1.to_player(),
            player2=self.player2.to_player(),
            best_of=self.best_of,
            grand_slam=self.grand_slam,
            seed=self.seed,
        )
