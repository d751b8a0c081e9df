#!/usr/bin/env python3
"""
Run one Alchemist game.

Usage:
  python scripts/run_game.py
  python scripts/run_game.py economy.seed=abc economy.days=10
  python scripts/run_game.py --resume runs/alchemist_20250101_120000/checkpoints.jsonl
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent to path
sys.path.append(str(Path(__file__).parent.parent))

import hydra
from omegaconf import DictConfig, OmegaConf

from engine.config import RunConfig
from engine.event_logger import CheckpointLogger, load_last_state
from engine.metrics import daily_results, standings
from engine.orchestrator import GameRunner
from players.registry import create_providers

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def load_config(config_name: str, overrides: list[str]) -> DictConfig:
    """Compose the Hydra config from conf/ with command line overrides."""
    hydra.initialize(config_path="../conf", version_base=None)
    try:
        return hydra.compose(config_name=config_name, overrides=overrides)
    finally:
        hydra.core.global_hydra.GlobalHydra.instance().clear()


async def play(cfg: DictConfig, resume: Path | None = None) -> Path:
    """
    Play a game and write checkpoints, standings and daily results.

    Args:
        cfg: Composed Hydra config
        resume: Checkpoint file to continue from

    Returns:
        The output directory
    """
    config = RunConfig.from_omegaconf(cfg)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(cfg.output.dir) / f"{config.economy.seed}_{timestamp}"
    output_dir.mkdir(parents=True, exist_ok=True)

    provider_kwargs = {}
    if cfg.output.log_prompts:
        provider_kwargs["output_dir"] = str(output_dir / "prompts")
    providers = create_providers(config, **provider_kwargs)

    logger.info("=" * 60)
    logger.info(f"Running Alchemist game: seed={config.economy.seed}")
    logger.info("=" * 60)
    logger.info(f"  Days: {config.days}")
    logger.info(f"  Starting silver: {config.starting_silver}")
    for provider in providers:
        logger.info(f"  Seat: {provider!r}")

    checkpoints = CheckpointLogger(output_dir / "checkpoints.jsonl")
    if resume is not None:
        checkpoint = load_last_state(resume)
        runner = GameRunner.resume(checkpoint, config, providers, checkpoint_logger=checkpoints)
    else:
        runner = GameRunner(config, providers, checkpoint_logger=checkpoints)

    final_state = await runner.run()

    standings_df = standings(final_state)
    standings_df.to_csv(output_dir / "standings.csv", index=False)
    daily_results(final_state).to_csv(output_dir / "daily_results.csv", index=False)
    with open(output_dir / "config.yaml", 'w') as f:
        f.write(OmegaConf.to_yaml(cfg))

    logger.info("\n" + "=" * 60)
    logger.info("GAME COMPLETE")
    logger.info("=" * 60)
    for row in standings_df.itertuples():
        status = f" (disqualified: {row.reason})" if row.disqualified else ""
        logger.info(f"  {row.rank}. {row.name}: {row.silver} silver{status}")
    logger.info(f"Results saved to: {output_dir}")
    return output_dir


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run an Alchemist game")
    parser.add_argument(
        "overrides",
        nargs="*",
        help="Hydra overrides (e.g. 'economy.seed=abc' 'economy.days=10')"
    )
    parser.add_argument("--config-name", type=str, default="config")
    parser.add_argument(
        "--resume",
        type=Path,
        default=None,
        help="Checkpoint JSONL to continue from"
    )

    args = parser.parse_args()

    try:
        cfg = load_config(args.config_name, args.overrides)
        asyncio.run(play(cfg, resume=args.resume))
        return 0
    except Exception as e:
        logger.error(f"\nGame failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
