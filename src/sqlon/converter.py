"""Converter facade tying codecs, pipeline and error handling together."""

import logging
from pathlib import Path
from typing import Optional, Union

from .error_handler import ErrorHandler
from .formats import JSONCodec, SQLCodec, SQLONCodec
from .io import ArtifactWriter
from .pipeline import DEFAULT_LOG_NAME, PipelineRunner, roundtrip_steps
from .profiler import PerformanceProfiler
from .types import CodecInterface, ConversionError, ConversionResult, ValidationResult

PathLike = Union[str, Path]


class SQLONConverter:
    """
    Main entry point for conversions between JSON, SQLON and SQL.

    Every method returns a ConversionResult instead of raising; failures are
    reported through ``success`` and ``errors``, with a suggested action
    from the error handler appended to the error list.
    """

    def __init__(self, json_indent: Optional[int] = 4,
                 out_dir: PathLike = "out",
                 log_name: str = DEFAULT_LOG_NAME,
                 enable_profiling: bool = True,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the converter.

        Args:
            json_indent: Indentation of JSON output (None for compact output)
            out_dir: Default directory for roundtrip artifacts
            log_name: File name of the step log inside the artifact directory
            enable_profiling: Whether roundtrip steps are profiled
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.out_dir = Path(out_dir)
        self.log_name = log_name
        self.enable_profiling = enable_profiling

        self.error_handler = ErrorHandler(self.logger)
        self.json_codec = JSONCodec(indent=json_indent, logger=self.logger)
        self.sqlon_codec = SQLONCodec(self.logger)
        self.sql_codec = SQLCodec(self.logger)
        self.writer = ArtifactWriter(self.logger)
        self.profiler = PerformanceProfiler(self.logger)

    # In-memory conversions

    def json_to_sqlon(self, json_string: str) -> ConversionResult:
        """
        Convert JSON text to SQLON text.

        Args:
            json_string: JSON document

        Returns:
            ConversionResult with the SQLON text as output
        """
        return self._convert(json_string, self.json_codec, self.sqlon_codec)

    def sqlon_to_json(self, sqlon_string: str) -> ConversionResult:
        return self._convert(sqlon_string, self.sqlon_codec, self.json_codec)

    def sqlon_to_sql(self, sqlon_string: str) -> ConversionResult:
        return self._convert(sqlon_string, self.sqlon_codec, self.sql_codec)

    def sql_to_sqlon(self, sql_string: str) -> ConversionResult:
        return self._convert(sql_string, self.sql_codec, self.sqlon_codec)

    def validate_json(self, json_string: str) -> ValidationResult:
        """
        Validate JSON text without converting it.

        Args:
            json_string: JSON document

        Returns:
            ValidationResult with syntax errors and shape warnings
        """
        return self.error_handler.validate_input(json_string)

    # File conversions

    def convert_file(self, input_path: PathLike, output_path: PathLike,
                     source: CodecInterface, target: CodecInterface) -> ConversionResult:
        """
        Convert one file into another.

        Args:
            input_path: File to read
            output_path: File to write
            source: Codec reading the input
            target: Codec writing the output

        Returns:
            ConversionResult listing the written file as its artifact
        """
        try:
            data = self.writer.read_bytes(input_path)
            database = source.decode(data)
            output = target.encode(database)
            self.writer.write_bytes(output_path, output)
        except ConversionError as e:
            return self._failure(e)

        self.logger.info(f"Converted {input_path} ({source.name}) to {output_path} ({target.name})")
        return ConversionResult(
            success=True,
            output=output.decode("utf-8"),
            table_count=len(database),
            artifacts=[str(output_path)]
        )

    def convert_json(self, json_path: PathLike) -> ConversionResult:
        """
        Convert a JSON file to SQLON and back.

        For an input ``<dir>/<name>.json`` this writes ``<dir>/../sqlon/<name>.sqlon``
        and ``<dir>/<name>.roundtrip.json``.

        Args:
            json_path: JSON file to convert

        Returns:
            ConversionResult with the round-tripped JSON as output
        """
        source = Path(json_path).absolute()
        base_name = source.name[:-len(".json")] if source.name.endswith(".json") else source.name
        sqlon_path = source.parent.parent / "sqlon" / f"{base_name}.sqlon"
        roundtrip_path = source.parent / f"{base_name}.roundtrip.json"

        try:
            data = self.writer.read_bytes(source)
            sqlon_output = self.sqlon_codec.encode(self.json_codec.decode(data))
            self.writer.write_bytes(sqlon_path, sqlon_output)
            json_output = self.json_codec.encode(self.sqlon_codec.decode(sqlon_output))
            self.writer.write_bytes(roundtrip_path, json_output)
        except ConversionError as e:
            return self._failure(e)

        return ConversionResult(
            success=True,
            output=json_output.decode("utf-8"),
            artifacts=[str(sqlon_path), str(roundtrip_path)]
        )

    def roundtrip(self, json_path: PathLike, out_dir: Optional[PathLike] = None,
                  prefix: str = "") -> ConversionResult:
        """
        Run the four-step JSON → SQLON → SQL → SQLON → JSON pipeline.

        Args:
            json_path: JSON file to run through the pipeline
            out_dir: Artifact directory (defaults to the converter's ``out_dir``)
            prefix: Artifact file name prefix

        Returns:
            ConversionResult with the final JSON as output and the artifacts
            followed by the step log path
        """
        directory = Path(out_dir) if out_dir is not None else self.out_dir
        log_path = directory / self.log_name
        runner = PipelineRunner(
            directory,
            log_path,
            writer=self.writer,
            profiler=self.profiler,
            enable_profiling=self.enable_profiling,
            logger=self.logger
        )

        try:
            data = self.writer.read_bytes(json_path)
            result = runner.run(roundtrip_steps(self.logger), data, prefix)
        except ConversionError as e:
            return self._failure(e)

        return ConversionResult(
            success=True,
            output=result.output.decode("utf-8"),
            artifacts=[record.artefact for record in result.records] + [str(log_path)]
        )

    def _convert(self, text: str, source: CodecInterface, target: CodecInterface) -> ConversionResult:
        try:
            database = source.decode(text.encode("utf-8"))
            output = target.encode(database)
        except ConversionError as e:
            return self._failure(e)

        self.logger.info(f"Converted {source.name} to {target.name}: {len(database)} tables")
        return ConversionResult(success=True, output=output.decode("utf-8"), table_count=len(database))

    def _failure(self, error: ConversionError) -> ConversionResult:
        response = self.error_handler.handle_conversion_error(error)
        return ConversionResult(
            success=False,
            errors=[str(error), response.suggested_action]
        )
