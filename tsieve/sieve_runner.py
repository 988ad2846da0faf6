"""
Sieve runner

Runs the configured sieves over a corpus file and writes their proposals:
1. Load documents and properties
2. Correct time-expression values (if enabled)
3. Run each sieve on each document with the document's existing links
4. Write proposals per document and sieve, unmerged, plus the corrections
5. Optionally write the corrected documents back out

Merging proposals into one consistent graph is left to the caller.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from tsieve.documents import SieveDocument, dump_documents, load_documents
from tsieve.logger import get_logger, set_log_level
from tsieve.properties import SieveProperties
from tsieve.sieve import Sieve, create_sieve
from tsieve.timex_corrector import TimexCorrector

logger = get_logger(__name__)

DEFAULT_SIEVES = ["reichenbach", "baseline_event_dct"]

ISO_UTC_MILLIS = "YYYY-MM-DD[T]HH:mm:ss.SSS[Z]"


def now_utc() -> str:
    return pendulum.now("UTC").format(ISO_UTC_MILLIS)


# ===| CONFIGURATION |===

@dataclass
class SieveRunnerConfig:
    """Configuration for a sieve run."""
    input_path: Path
    output_path: Path
    properties_path: Optional[Path] = None
    documents_output_path: Optional[Path] = None

    # Overrides for the properties file
    sieve_names: List[str] = field(default_factory=list)
    correct_timexes: Optional[bool] = None


# ===| RUNNER |===

class SieveRunner:
    """
    Applies sieves to every document of a corpus.

    Sieves are built from the properties at construction. Phases of run():
    1. Load documents
    2. Correct timex values and annotate with each sieve
    3. Write output, and the corrected documents if requested
    """

    def __init__(self, config: SieveRunnerConfig):
        self.config = config
        self.properties = SieveProperties.load(config.properties_path)
        self.sieves: List[Sieve] = [
            create_sieve(name, self.properties) for name in self._resolve_sieve_names()
        ]
        self.corrector = TimexCorrector()
        self.run_started_at_utc: Optional[str] = None

    def _resolve_sieve_names(self) -> List[str]:
        return self.config.sieve_names or self.properties.sieve_names() or list(DEFAULT_SIEVES)

    def _correction_enabled(self) -> bool:
        if self.config.correct_timexes is not None:
            return self.config.correct_timexes
        return self.properties.get_bool("timex", "correct_values", True)

    def run(self) -> Dict[str, Any]:
        """Execute the run. Returns statistics."""
        self.run_started_at_utc = now_utc()
        logger.info(f"Starting sieve run with: {', '.join(s.name for s in self.sieves)}")
        stats: Dict[str, Any] = {
            "documents": 0,
            "timex_corrections": 0,
            "proposals_by_sieve": {s.name: 0 for s in self.sieves},
        }

        try:
            logger.info(f"Phase 1: Loading documents from {self.config.input_path}")
            documents = load_documents(self.config.input_path)
            stats["documents"] = len(documents)

            results = []
            correct = self._correction_enabled()
            logger.info(f"Phase 2: Annotating documents (timex correction {'on' if correct else 'off'})")
            for doc in documents:
                result = self._process_document(doc, correct)
                stats["timex_corrections"] += len(result["timex_corrections"])
                for sieve_name, proposals in result["proposals"].items():
                    stats["proposals_by_sieve"][sieve_name] += len(proposals)
                results.append(result)

            logger.info(f"Phase 3: Writing proposals to {self.config.output_path}")
            self._write_output(results, stats)
            if self.config.documents_output_path is not None:
                logger.info(f"Writing corrected documents to {self.config.documents_output_path}")
                dump_documents(documents, self.config.documents_output_path)

        except Exception as e:
            logger.error(f"Sieve run failed: {e}")
            raise

        logger.info("Sieve run completed successfully")
        return stats

    def _process_document(self, doc: SieveDocument, correct: bool) -> Dict[str, Any]:
        corrections = self.corrector.apply(doc) if correct else []

        proposals = {}
        for sieve in self.sieves:
            tlinks = sieve.annotate(doc, list(doc.tlinks))
            proposals[sieve.name] = [t.to_dict() for t in tlinks]

        return {
            "name": doc.name,
            "timex_corrections": [c.to_dict() for c in corrections],
            "proposals": proposals,
        }

    def _write_output(self, results: List[Dict[str, Any]], stats: Dict[str, Any]):
        output_path = Path(self.config.output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w", encoding="utf-8") as f:
            json.dump({
                "run_started_at_utc": self.run_started_at_utc,
                "documents": results,
                "stats": stats,
            }, f, indent=2)


def run_sieves(config: SieveRunnerConfig) -> Dict[str, Any]:
    """Run the configured sieves over a corpus file."""
    runner = SieveRunner(config)
    return runner.run()


if __name__ == "__main__":
    from argparse import ArgumentParser

    parser = ArgumentParser(description="Run temporal relation sieves over an annotated corpus")
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the corpus file (JSON or YAML)"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("proposals.json"),
        help="Path of the JSON file to write proposals to (default: proposals.json)"
    )
    parser.add_argument(
        "--properties",
        type=Path,
        default=None,
        help="Path to the sieve properties YAML (default: $TSIEVE_PROPERTIES)"
    )
    parser.add_argument(
        "--documents-output",
        type=Path,
        default=None,
        help="Also write the (timex-corrected) documents to this JSON file"
    )
    parser.add_argument(
        "--sieve",
        action="append",
        default=[],
        help="Sieve to run; repeat for several (default: from properties)"
    )
    parser.add_argument(
        "--no-timex-correction",
        action="store_true",
        help="Leave timex values as tagged"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        set_log_level("DEBUG")

    config = SieveRunnerConfig(
        input_path=args.input,
        output_path=args.output,
        properties_path=args.properties,
        documents_output_path=args.documents_output,
        sieve_names=args.sieve,
        correct_timexes=False if args.no_timex_correction else None
    )

    stats = run_sieves(config)

    logger.info("\n=== Sieve Run Summary ===")
    logger.info(f"Documents: {stats['documents']}")
    logger.info(f"Timex corrections: {stats['timex_corrections']}")
    logger.info("\nProposals by sieve:")
    for name, count in sorted(stats['proposals_by_sieve'].items()):
        logger.info(f"  {name}: {count}")
