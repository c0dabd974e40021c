"""
CLI entrypoint for the taxonomy engine.

This script performs the following steps:
- loads .env (optional) and configs/engine.yaml (optional)
- loads the taxonomy forest and re-assigns hierarchical ids
- rolls leaf scores up through the forest (if a scores file is given)
- diffs against a previous version of the taxonomy (if given) and records audit entries
- writes the identified taxonomy, rollup table and audit entries under the output directory
"""

import argparse
import logging
import math
import uuid
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from application import AuditLog, TaxonomyWorkspace
from domain.aggregation import AggregationMode, compute_rollup_table_and_save
from domain.audit import EntityType
from domain.taxonomy import TreeNode, dump_forest
from infrastructure.config import EngineConfig, load_engine_config, load_forest, load_leaf_scores, load_weight_config
from infrastructure.constants import ENGINE_FILE
from infrastructure.io import ensure_exists, write_json
from infrastructure.observability import configure_logging, make_session_tag, set_log_context

logger = logging.getLogger(__name__)

IDENTIFIED_FILENAME = "taxonomy.identified.json"
ROLLUP_FILENAME = "rollup.csv"
AUDIT_FILENAME = "audit.json"


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Identify, roll up and audit a risk/process taxonomy")
    p.add_argument("--taxonomy", type=str, required=True, help="Taxonomy forest (YAML/JSON)")
    p.add_argument(
        "--kind",
        type=str,
        default=EntityType.RISK.value,
        choices=[EntityType.RISK.value, EntityType.PROCESS.value],
        help="Taxonomy kind (default: risk)",
    )
    p.add_argument("--previous", type=str, default=None, help="Previous taxonomy version to diff against")
    p.add_argument("--weights", type=str, default=None, help="Weights file; overrides weights in engine.yaml")
    p.add_argument("--scores", type=str, default=None, help="Leaf scores (CSV/XLSX or YAML/JSON mapping)")
    p.add_argument(
        "--config",
        type=str,
        default=str(ENGINE_FILE),
        help="Path to engine.yaml (default: configs/engine.yaml; skipped if missing)",
    )
    p.add_argument("--env", type=str, default=".env", help="Path to .env file (default: .env; skipped if missing)")
    p.add_argument("--output-dir", type=str, default=None, help="Output directory (default: from config)")
    p.add_argument(
        "--mode",
        type=str,
        default=None,
        choices=[m.value for m in AggregationMode],
        help="Aggregation mode (default: from config)",
    )
    p.add_argument("--strict", action="store_true", help="Fail on NaN/inf leaf scores")
    p.add_argument("--actor", type=str, default=None, help="Actor recorded in audit entries")
    p.add_argument(
        "--console-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level",
    )
    return p.parse_args()


def _load_config(path: Path) -> EngineConfig:
    if path.exists():
        return load_engine_config(path)
    logger.info("No engine config at %s; using defaults.", path)
    return EngineConfig()


def main() -> None:
    args = _parse_args()

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)

    cfg = _load_config(Path(args.config))

    if args.weights:
        cfg = cfg.model_copy(update={"weights": load_weight_config(Path(args.weights))})
    mode = AggregationMode(args.mode) if args.mode else cfg.aggregation_mode
    strict = bool(args.strict or cfg.strict_scores)
    actor = args.actor or cfg.audit.actor

    session_id = f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{args.kind}_{uuid.uuid4().hex[:6]}"
    out_dir = Path(args.output_dir) if args.output_dir else cfg.output_dir / session_id
    out_dir.mkdir(parents=True, exist_ok=True)

    configure_logging(log_file=cfg.log_file, console_level=getattr(logging, args.console_level))
    set_log_context(session_id_full=session_id, taxonomy=args.kind, actor=actor)
    logger.info("Starting session: %s (tag=%s)", session_id, make_session_tag(session_id))

    taxonomy_path = Path(args.taxonomy)
    ensure_exists(taxonomy_path, "taxonomy file")

    workspace = TaxonomyWorkspace(
        args.kind,
        weights=cfg.weights,
        audit_log=AuditLog(max_entries=cfg.audit.max_entries, prune_amount=cfg.audit.prune_amount),
    )

    if args.previous:
        previous_path = Path(args.previous)
        ensure_exists(previous_path, "previous taxonomy file")
        # Baseline: its own entries describe creating the old tree, not this change
        workspace.replace_forest(load_forest(previous_path), actor)
        baseline_count = len(workspace.audit_log)
    else:
        baseline_count = 0

    entries = workspace.replace_forest(load_forest(taxonomy_path), actor)
    forest = workspace.forest
    logger.info("Identified %d root nodes", len(forest))
    write_json(out_dir / IDENTIFIED_FILENAME, dump_forest(forest))

    if args.previous:
        audit_path = write_json(
            out_dir / AUDIT_FILENAME,
            [e.model_dump(mode="json", by_alias=True) for e in entries],
        )
        logger.info("Recorded %d audit entries (baseline %d): %s", len(entries), baseline_count, audit_path)

    if args.scores:
        scores_path = Path(args.scores)
        ensure_exists(scores_path, "scores file")
        scores = load_leaf_scores(scores_path, cfg.scores)

        def leaf_score(node: TreeNode) -> float:
            if node.id not in scores:
                logger.warning("No score for leaf %s (%s)", node.id, node.hierarchical_id)
                return math.nan
            return scores[node.id]

        values = workspace.rollup(leaf_score, mode=mode, strict=strict)
        rollup_path = compute_rollup_table_and_save(
            forest=forest,
            weights=workspace.weights,
            values=values,
            output_dir=out_dir,
            filename=ROLLUP_FILENAME,
        )
        logger.info("Saved rollup (%s mode) to %s", mode.value, rollup_path)

    logger.info("Outputs: %s", out_dir)


if __name__ == "__main__":
    main()
