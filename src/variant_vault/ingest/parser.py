"""Parse 23andMe-style genotype exports, plain or zip-wrapped."""

import io
import zipfile
from collections import Counter
from pathlib import Path

import structlog

from variant_vault.exceptions import IngestionError
from variant_vault.ingest.models import FormatCheck, ParsedFile, VariantRecord

logger = structlog.get_logger()

NO_CALL = "--"
IDENTIFIER_PREFIX = "rs"
MAX_PARSE_ERRORS = 100
TEXT_EXTENSIONS = (".txt", ".tsv", ".csv")


def _split_fields(line: str) -> list[str]:
    """Split on tab when the line has one, otherwise on comma."""
    if "\t" in line:
        return line.split("\t")
    return line.split(",")


def _parse_position(raw: str) -> int | None:
    """Return the position as a positive int, or None if it is not one."""
    if not (raw.isascii() and raw.isdigit()):
        return None
    position = int(raw)
    return position if position > 0 else None


def parse_genome_text(
    content: str,
    source_name: str = "unknown",
    no_call: str = NO_CALL,
    identifier_prefix: str = IDENTIFIER_PREFIX,
    max_errors: int = MAX_PARSE_ERRORS,
) -> ParsedFile:
    """Parse export text into a ParsedFile.

    Blank lines and lines starting with '#' are skipped without counting.
    Every other line is a data line: it is split on tab (or comma when it has
    no tab) and its first four fields are read as identifier, chromosome,
    position and genotype. Malformed data lines are recorded as
    "Line N: ..." errors, where N counts data lines, and skipped. No-call
    genotypes are dropped silently.

    Args:
        content: Full text of the export
        source_name: Name recorded on the result (usually the file name)
        no_call: Genotype value that marks a no-call
        identifier_prefix: Prefix of identifiers matchable against the reference db
        max_errors: Number of error messages retained

    Returns:
        ParsedFile with accepted records in input order
    """
    parsed = ParsedFile(source_name=source_name)

    def reject(message: str) -> None:
        parsed.error_count += 1
        if len(parsed.parse_errors) < max_errors:
            parsed.parse_errors.append(message)

    for line in content.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue

        parsed.data_line_count += 1
        line_number = parsed.data_line_count

        parts = _split_fields(trimmed)
        if len(parts) < 4:
            reject(
                f"Line {line_number}: Invalid format - expected 4 columns, got {len(parts)}"
            )
            continue

        identifier, chromosome, raw_position, genotype = (p.strip() for p in parts[:4])

        if not identifier:
            reject(f"Line {line_number}: Missing identifier")
            continue

        position = _parse_position(raw_position)
        if position is None:
            reject(f'Line {line_number}: Invalid position "{raw_position}"')
            continue

        if not genotype or genotype == no_call:
            parsed.no_call_count += 1
            continue

        parsed.records.append(VariantRecord(
            identifier=identifier,
            chromosome=chromosome or "unknown",
            position=position,
            genotype=genotype,
        ))
        if identifier.startswith(identifier_prefix):
            parsed.matchable_identifier_count += 1

    logger.info(
        "parse_genome_complete",
        source_name=source_name,
        data_lines=parsed.data_line_count,
        accepted=parsed.total_count,
        matchable=parsed.matchable_identifier_count,
        no_calls=parsed.no_call_count,
        errors=parsed.error_count,
    )

    return parsed


def find_genome_member(names: list[str]) -> str | None:
    """Pick the archive member most likely to hold genotype data.

    The first entry (in archive order) that mentions "genome", ends in a text
    extension, or has no extension at all wins. Directory entries never match.
    """
    for name in names:
        if name.endswith("/"):
            continue
        lowered = name.lower()
        if "genome" in lowered or lowered.endswith(TEXT_EXTENSIONS):
            return name
        if "." not in name and "/" not in name:
            return name
    return None


def _read_zip_text(path: Path) -> str:
    try:
        with zipfile.ZipFile(path) as zf:
            names = zf.namelist()
            logger.debug("zip_members", path=str(path), members=names)

            member = find_genome_member(names)
            if member is None:
                raise IngestionError(
                    "Failed to parse zip file",
                    f"No genome data file found in zip archive. Found files: {', '.join(names)}",
                )

            logger.info("zip_extract_member", path=str(path), member=member)
            with zf.open(member) as handle:
                return io.TextIOWrapper(handle, encoding="utf-8-sig").read()
    except IngestionError:
        raise
    except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as e:
        raise IngestionError("Failed to parse zip file", str(e)) from e


def read_genome_text(path: Path | str) -> str:
    """Read an export file to text, unwrapping .zip archives.

    Raises:
        IngestionError: If the file cannot be read or decoded, or a zip has
            no identifiable genome member
    """
    path = Path(path)

    if path.suffix.lower() == ".zip":
        return _read_zip_text(path)

    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise IngestionError("Failed to read file", str(e)) from e


def parse_genome_file(
    path: Path | str,
    no_call: str = NO_CALL,
    identifier_prefix: str = IDENTIFIER_PREFIX,
    max_errors: int = MAX_PARSE_ERRORS,
) -> ParsedFile:
    """Read and parse an export file; the file name becomes the source name."""
    path = Path(path)
    content = read_genome_text(path)
    return parse_genome_text(
        content,
        source_name=path.name,
        no_call=no_call,
        identifier_prefix=identifier_prefix,
        max_errors=max_errors,
    )


def validate_genome_format(content: str, sample_lines: int = 100) -> FormatCheck:
    """Quick sniff of whether content looks like a 23andMe-style export.

    Looks at the first `sample_lines` lines only. Content is rejected when it
    has no data lines, or when fewer than half of the first ten data lines are
    four-column rows starting with an rsID.
    """
    lines = content.split("\n")[:sample_lines]
    data_lines = [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]

    if not data_lines:
        return FormatCheck(is_valid=False, reason="No data lines found")

    sample = data_lines[:10]
    valid = 0
    for line in sample:
        parts = _split_fields(line)
        if len(parts) >= 4 and parts[0].strip().startswith(IDENTIFIER_PREFIX):
            valid += 1

    if valid / len(sample) < 0.5:
        return FormatCheck(
            is_valid=False,
            reason="File does not appear to contain 23andMe format data",
        )

    return FormatCheck(is_valid=True)


def summarize_parsed_file(parsed: ParsedFile) -> dict:
    """Summary statistics for display after parsing.

    Returns:
        Dict with total_variants, matchable_identifier_count, chromosome_count,
        chromosomes, genotype_lengths ({allele count: records}), parse_errors
        and source_name.
    """
    chromosomes = parsed.chromosomes
    genotype_lengths = Counter(len(r.genotype) for r in parsed.records)

    return {
        "total_variants": parsed.total_count,
        "matchable_identifier_count": parsed.matchable_identifier_count,
        "chromosome_count": len(chromosomes),
        "chromosomes": chromosomes,
        "genotype_lengths": dict(sorted(genotype_lengths.items())),
        "parse_errors": parsed.error_count,
        "source_name": parsed.source_name,
    }
