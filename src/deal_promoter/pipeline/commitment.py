"""
Piece commitment calculation via `boostx commp`.

Expected stdout on success:
    CommP CID: baga6ea4seaq...
    Piece size: 2048
    Car file size: 1921
"""

from pathlib import Path

from pydantic import ValidationError

from ..clients.process_runner import ProcessRunner
from ..errors import ParseError, ProcessError
from ..logging import get_logger
from ..models.deal import CommitmentResult
from .schema import LineField, LineSchema, unsigned_int

logger = get_logger(__name__)

COMMP_REPORT = LineSchema(
    'commp report',
    [
        LineField('commp_cid', 'CommP CID'),
        LineField('piece_size', 'Piece size', unsigned_int),
        LineField('car_file_size', 'Car file size', unsigned_int),
    ],
)


def parse_commp_report(stdout: str) -> CommitmentResult:
    """
    Parse the three-line commp report into a CommitmentResult.

    Raises:
        ParseError: If any line is missing or malformed, or a size is zero
    """
    fields = COMMP_REPORT.parse(stdout)
    try:
        return CommitmentResult(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        name = str(error['loc'][0]) if error['loc'] else None
        raise ParseError(
            f"Resolve {name} failure: {error['msg']}",
            context={'schema': COMMP_REPORT.name, 'value': fields.get(name)},
            field=name,
        ) from e


class CommitmentCalculator:
    """Invokes the piece-commitment tool and parses its report."""

    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    async def compute(self, path: str | Path) -> CommitmentResult:
        """
        Compute the piece commitment of a local CAR file.

        Raises:
            ProcessError: If the tool cannot run, times out, or exits nonzero
            ParseError: If the report does not match the expected schema
        """
        output = await self.runner.run('commp', str(path))
        if not output.success:
            raise ProcessError(
                output.stderr.strip() or f'{self.runner.binary} commp exited with {output.returncode}',
                context={'returncode': output.returncode},
                stderr=output.stderr,
                returncode=output.returncode,
            )

        result = parse_commp_report(output.stdout)
        logger.info(
            'commp.complete',
            commp_cid=result.commp_cid,
            piece_size=result.piece_size,
            car_file_size=result.car_file_size,
            duration_ms=round(output.duration_ms, 2),
        )
        return result
