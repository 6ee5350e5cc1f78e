"""Pipeline runner chaining codecs and recording every step."""

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .formats import JSONCodec, SQLCodec, SQLONCodec
from .io import ArtifactWriter
from .profiler import PerformanceProfiler
from .types import CodecInterface, ConversionError, PipelineResult, StepRecord

DEFAULT_LOG_NAME = "pipeline.log.jsonl"


class PipelineStep:
    """
    One conversion: decode with ``source``, encode with ``target``.

    Args:
        name: Step name written to the step log
        ext: Extension of the artifact the step produces
        source: Codec reading the step input
        target: Codec writing the step output
    """

    def __init__(self, name: str, ext: str, source: CodecInterface, target: CodecInterface):
        self.name = name
        self.ext = ext
        self.source = source
        self.target = target

    def run(self, data: bytes) -> bytes:
        return self.target.encode(self.source.decode(data))

    def __repr__(self) -> str:
        return f"PipelineStep({self.name!r}, {self.ext!r})"


def json_to_sqlon(logger: Optional[logging.Logger] = None) -> PipelineStep:
    return PipelineStep("JSON → SQLON", "sqlon", JSONCodec(logger=logger), SQLONCodec(logger))


def sqlon_to_sql(logger: Optional[logging.Logger] = None) -> PipelineStep:
    return PipelineStep("SQLON → SQL (SQLite)", "sqlite.sql", SQLONCodec(logger), SQLCodec(logger))


def sql_to_sqlon(logger: Optional[logging.Logger] = None) -> PipelineStep:
    return PipelineStep("SQL → SQLON", "roundtrip.sqlon", SQLCodec(logger), SQLONCodec(logger))


def sqlon_to_json(logger: Optional[logging.Logger] = None) -> PipelineStep:
    return PipelineStep("SQLON → JSON", "json.out.json", SQLONCodec(logger), JSONCodec(logger=logger))


def roundtrip_steps(logger: Optional[logging.Logger] = None) -> List[PipelineStep]:
    """The four steps JSON → SQLON → SQL → SQLON → JSON."""
    return [json_to_sqlon(logger), sqlon_to_sql(logger), sql_to_sqlon(logger), sqlon_to_json(logger)]


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class PipelineRunner:
    """
    Runs steps in order, feeding each step's output into the next.

    Every step output is written to ``<out_dir>/<prefix><NN>.<ext>`` and,
    when a log path is set, one JSON line describing the step is appended
    to the log, which is emptied when a run starts. The first failing step
    aborts the run.
    """

    def __init__(self, out_dir: Union[str, Path], log_path: Optional[Union[str, Path]] = None,
                 writer: Optional[ArtifactWriter] = None,
                 profiler: Optional[PerformanceProfiler] = None,
                 enable_profiling: bool = True,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the pipeline runner.

        Args:
            out_dir: Directory receiving the step artifacts
            log_path: Optional JSON-lines step log path
            writer: Optional ArtifactWriter instance
            profiler: Optional PerformanceProfiler instance
            enable_profiling: Whether step duration and memory are measured
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.out_dir = Path(out_dir)
        self.log_path = Path(log_path) if log_path is not None else None
        self.writer = writer or ArtifactWriter(self.logger)
        self.profiler = profiler or PerformanceProfiler(self.logger)
        self.enable_profiling = enable_profiling

    def run(self, steps: List[PipelineStep], data: bytes, prefix: str = "") -> PipelineResult:
        """
        Run a list of steps.

        Args:
            steps: Steps to run, in order
            data: Input of the first step
            prefix: Artifact file name prefix

        Returns:
            PipelineResult with the last step's output and one record per step

        Raises:
            ConversionError: If a step fails or an artifact cannot be written
        """
        self.writer.ensure_directory(self.out_dir)
        if self.log_path is not None:
            self.writer.write_bytes(self.log_path, b"")
        result = PipelineResult(output=data)
        current = data

        for index, step in enumerate(steps, start=1):
            try:
                output, duration_ms, memory_peak_mb = self._run_step(step, current)
            except ConversionError as e:
                error = ConversionError(
                    f"{step.name}: {e}",
                    e.error_type,
                    context={"step": step.name, "index": index, "cause": e.context},
                )
                error.line = e.line
                raise error from e

            artefact = self.out_dir / self.writer.artifact_name(prefix, index, step.ext)
            self.writer.write_bytes(artefact, output)

            record = StepRecord(
                time=datetime.now(timezone.utc).isoformat(),
                step=step.name,
                in_bytes=len(current),
                out_bytes=len(output),
                in_sha256=sha256_hex(current),
                out_sha256=sha256_hex(output),
                artefact=str(artefact),
                duration_ms=duration_ms,
                memory_peak_mb=memory_peak_mb,
            )
            if self.log_path is not None:
                self.writer.append_record(self.log_path, record)
            result.records.append(record)

            self.logger.info(f"{step.name}: {record.in_bytes} -> {record.out_bytes} bytes ({artefact})")
            current = output

        result.output = current
        return result

    def _run_step(self, step: PipelineStep, data: bytes) -> Tuple[bytes, float, float]:
        """Run one step and return its output, duration in ms and peak memory in MB."""
        if not self.enable_profiling:
            return step.run(data), 0.0, 0.0

        with self.profiler.profile_operation(step.name, len(data)) as outcome:
            database = step.source.decode(data)
            # Peak while the decoded tables are held
            self.profiler.sample_performance()
            output = step.target.encode(database)
            outcome["output_size"] = len(output)

        metrics = self.profiler.last_metrics
        return output, metrics.duration_ms, metrics.memory_peak_mb
