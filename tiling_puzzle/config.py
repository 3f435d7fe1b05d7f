import logging
import os
from dataclasses import dataclass, field

LOG_LEVEL_ENV = "TILING_PUZZLE_LOG_LEVEL"


@dataclass
class SessionConfig:
    reset_undoable: bool = True     # reset pushes the pre-reset state onto undo history
    log_level: str = field(default_factory=lambda: os.environ.get(LOG_LEVEL_ENV, "INFO"))
    solver_max_nodes: int = 200_000


def configure_logging(config: SessionConfig) -> None:
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
