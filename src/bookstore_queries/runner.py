"""
OperationRunner - runs the bookstore operations against one collection.

Opens a single connection, executes every operation in order, renders each
result as it arrives and closes the connection whether the run succeeded or
not.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence, TextIO

from loguru import logger

from .catalog import Section, bookstore_sections
from .client import StoreClient
from .config import StoreConfig
from .operations import Operation
from .render import Renderer
from .types import OperationFailure, RunReport, StepOutcome, StoreError, UnexpectedCountError

__all__ = ["OperationRunner", "ClientFactory"]

ClientFactory = Callable[[StoreConfig], StoreClient]


def _default_client(config: StoreConfig) -> StoreClient:
    return StoreClient(
        config.uri,
        server_selection_timeout_ms=config.server_selection_timeout_ms,
    )


class OperationRunner:
    """
    Sequential runner for store operations.

    Operations run strictly one after another on a single connection. The
    first failure is logged and ends the run; writes that already happened
    are kept. The connection is released on every exit path.

    Example:
        runner = OperationRunner(StoreConfig(uri="mongodb://localhost:27017"))
        report = await runner.run()
        if report.error:
            ...
    """

    def __init__(
        self,
        config: StoreConfig,
        sections: Sequence[Section] | None = None,
        output: TextIO | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """
        Initialize the runner.

        Args:
            config: Store location and count policy.
            sections: Operations to run, grouped under banners. Defaults to
                      the bookstore sequence.
            output: Stream results are written to (default: stdout).
            client_factory: Builds the store client from the config.
        """
        self._config = config
        self._sections = list(sections) if sections is not None else bookstore_sections()
        self._renderer = Renderer(output)
        self._client_factory = client_factory or _default_client

    @classmethod
    def from_operations(
        cls,
        config: StoreConfig,
        operations: Sequence[Operation],
        **kwargs: Any,
    ) -> OperationRunner:
        """Build a runner for a flat list of operations with no banners."""
        return cls(config, [Section("", list(operations))], **kwargs)

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def operations(self) -> list[Operation]:
        """All operations in run order."""
        return [op for section in self._sections for op in section.operations]

    async def run(self) -> RunReport:
        """
        Execute every operation in order.

        Returns:
            RunReport describing what ran. Store failures are reported
            through ``RunReport.error`` instead of being raised.
        """
        report = RunReport()
        client = self._client_factory(self._config)
        out = self._renderer

        try:
            await client.connect()
            logger.info("Connected to {} ({})", client.uri, self._config.namespace)
            out.line("Connected to MongoDB")

            collection = client.get_collection(
                self._config.database_name,
                self._config.collection_name,
            )

            step = 0
            for section in self._sections:
                if section.title:
                    out.section(section.title)
                for operation in section.operations:
                    step += 1
                    value = await self._run_step(step, operation, collection)
                    report.outcomes.append(StepOutcome(step, operation.name, value))

            report.completed = True
            out.line()
            out.line("All queries executed successfully!")
        except StoreError as e:
            logger.error("Run aborted: {}", e)
            out.line(f"Error: {e}")
            report.error = e
        finally:
            await client.close()
            report.closed = True
            out.line("Connection closed.")
            logger.info("Connection closed")

        return report

    async def _run_step(self, step: int, operation: Operation, collection: Any) -> Any:
        """Execute, check and render one operation."""
        logger.debug("Step {}: {!r}", step, operation)
        try:
            value = await operation.execute(collection)
            if self._config.strict_counts and operation.counts_writes and value == 0:
                raise UnexpectedCountError(
                    f"{operation.name} affected no documents",
                    step=step,
                    operation=operation.name,
                )
            operation.render(value, self._renderer)
        except StoreError:
            raise
        except Exception as e:
            raise OperationFailure(
                f"Step {step} ({operation.name}) failed: {e}",
                step=step,
                operation=operation.name,
            ) from e
        return value
