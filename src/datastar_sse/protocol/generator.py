"""Server-sent event generator bound to one request/response pair."""

import json
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from pydantic import ValidationError

from datastar_sse.config import Settings
from datastar_sse.errors import CommandValidationError, ErrorCode
from datastar_sse.protocol.encoder import EventEncoder
from datastar_sse.protocol.models import (
    EventType,
    ExecuteScriptOptions,
    MergeFragmentsOptions,
    MergeSignalsOptions,
    RemoveFragmentsOptions,
    SendOptions,
    wire_value,
)
from datastar_sse.protocol.script import sanitize_script
from datastar_sse.protocol.signals import read_signals

OptionsT = TypeVar("OptionsT", bound=SendOptions)


def _strip_line_breaks(html: str) -> str:
    return html.replace("\r", "").replace("\n", "")


def _resolve_options(
    command: str,
    model: type[OptionsT],
    options: OptionsT | Mapping[str, Any] | None,
    overrides: dict[str, Any],
) -> OptionsT:
    """Build the options model for a command from a model, a mapping, or keywords."""
    if isinstance(options, model) and not overrides:
        return options
    if isinstance(options, SendOptions):
        data = options.model_dump(exclude_unset=True)
    else:
        data = dict(options or {})
    data.update(overrides)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise CommandValidationError(
            command,
            "received invalid options.",
            ErrorCode.COMMAND_INVALID_OPTIONS,
            {"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        ) from e


class ServerSentEventGenerator(EventEncoder):
    """Datastar command interface for one connection.

    Create one per request. Each command validates its input, renders its
    data lines, and hands them to ``send``, which writes to the bound
    response (if it can be written to) and returns the event string.

    Example:
        ```python
        stream = StreamResponse()
        sse = ServerSentEventGenerator(request, stream)
        sse.merge_fragments('<div id="quote">Hello</div>')
        sse.merge_signals({"lastUpdate": 1700000000000})
        stream.close()
        return sse_response(sse, stream)
        ```
    """

    def __init__(
        self,
        request: Any = None,
        response: Any = None,
        settings: Settings | None = None,
    ):
        """Initialize the generator.

        Args:
            request: Inbound request, needed only by ``read_signals``
            response: Response exposing ``set_header``/``write``, or None when
                the caller streams the returned event strings itself
            settings: Settings supplying protocol defaults
        """
        super().__init__(response, settings)
        self.request = request

    def merge_fragments(
        self,
        fragments: str | Sequence[str],
        options: MergeFragmentsOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a ``datastar-merge-fragments`` event.

        Args:
            fragments: One HTML fragment or a sequence of them
            options: Selector, merge mode, settle duration, view transition
                and send options; keyword arguments override it

        Returns:
            The rendered event

        Raises:
            CommandValidationError: If fragments are missing or not strings
        """
        command = "MergeFragments"
        if not fragments:
            raise CommandValidationError(command, "missing fragment(s).")
        if isinstance(fragments, str):
            fragment_list = [fragments]
        elif isinstance(fragments, Sequence) and all(isinstance(f, str) for f in fragments):
            fragment_list = list(fragments)
        else:
            raise CommandValidationError(
                command,
                "received an invalid type for fragments. Expected string or sequence of strings.",
                ErrorCode.COMMAND_INVALID_TYPE,
                {"received": type(fragments).__name__},
            )
        opts = _resolve_options(command, MergeFragmentsOptions, options, kwargs)

        data_lines = []
        if opts.selector is not None:
            data_lines.append(f"selector {opts.selector}")
        if opts.merge_mode is not None:
            data_lines.append(f"mergeMode {wire_value(opts.merge_mode)}")
        if opts.settle_duration is not None:
            data_lines.append(f"settleDuration {opts.settle_duration}")
        if opts.use_view_transition is not None:
            data_lines.append(f"useViewTransition {wire_value(opts.use_view_transition)}")
        data_lines.extend(f"fragments {_strip_line_breaks(f)}" for f in fragment_list)

        return self.send(EventType.MERGE_FRAGMENTS, data_lines, opts)

    def remove_fragments(
        self,
        selector: str,
        options: RemoveFragmentsOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a ``datastar-remove-fragments`` event for a CSS selector."""
        command = "RemoveFragments"
        if not selector:
            raise CommandValidationError(command, "missing selector.")
        if not isinstance(selector, str):
            raise CommandValidationError(
                command,
                "received an invalid type for selector. Expected string.",
                ErrorCode.COMMAND_INVALID_TYPE,
                {"received": type(selector).__name__},
            )
        opts = _resolve_options(command, RemoveFragmentsOptions, options, kwargs)

        data_lines = []
        if opts.settle_duration is not None:
            data_lines.append(f"settleDuration {opts.settle_duration}")
        if opts.use_view_transition is not None:
            data_lines.append(f"useViewTransition {wire_value(opts.use_view_transition)}")
        data_lines.append(f"selector {_strip_line_breaks(selector)}")

        return self.send(EventType.REMOVE_FRAGMENTS, data_lines, opts)

    def merge_signals(
        self,
        signals: Mapping[str, Any],
        options: MergeSignalsOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a ``datastar-merge-signals`` event.

        The signal map is serialized as compact JSON. ``onlyIfMissing true``
        is emitted only when ``only_if_missing`` is True.
        """
        command = "MergeSignals"
        if signals is None:
            raise CommandValidationError(command, "missing signals.")
        if not isinstance(signals, Mapping):
            raise CommandValidationError(
                command,
                "received an invalid type for signals. Expected a mapping.",
                ErrorCode.COMMAND_INVALID_TYPE,
                {"received": type(signals).__name__},
            )
        opts = _resolve_options(command, MergeSignalsOptions, options, kwargs)
        try:
            payload = json.dumps(
                dict(signals), separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
        except (TypeError, ValueError) as e:
            raise CommandValidationError(
                command,
                "received signals that cannot be serialized to JSON.",
                ErrorCode.COMMAND_SERIALIZATION_ERROR,
                {"reason": str(e)},
            ) from e

        data_lines = []
        if opts.only_if_missing is True:
            data_lines.append("onlyIfMissing true")
        data_lines.append(f"signals {payload}")

        return self.send(EventType.MERGE_SIGNALS, data_lines, opts)

    def remove_signals(
        self,
        paths: str | Sequence[str],
        options: SendOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a ``datastar-remove-signals`` event, one ``paths`` line per path."""
        command = "RemoveSignals"
        if not paths:
            raise CommandValidationError(command, "missing paths.")
        if isinstance(paths, str):
            path_list = [paths]
        elif isinstance(paths, Sequence) and all(isinstance(p, str) and p for p in paths):
            path_list = list(paths)
        else:
            raise CommandValidationError(
                command,
                "received invalid paths. Expected a sequence of non-empty strings.",
                ErrorCode.COMMAND_INVALID_TYPE,
                {"received": type(paths).__name__},
            )
        opts = _resolve_options(command, SendOptions, options, kwargs)

        data_lines = [f"paths {_strip_line_breaks(path)}" for path in path_list]
        return self.send(EventType.REMOVE_SIGNALS, data_lines, opts)

    def execute_script(
        self,
        script: str | None = None,
        options: ExecuteScriptOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> str:
        """Send a ``datastar-execute-script`` event.

        The script is flattened to one comment-free line. When there is no
        script, or only comments, the ``script`` line is left out.
        """
        command = "ExecuteScript"
        if script is not None and not isinstance(script, str):
            raise CommandValidationError(
                command,
                "received an invalid type for script. Expected string.",
                ErrorCode.COMMAND_INVALID_TYPE,
                {"received": type(script).__name__},
            )
        opts = _resolve_options(command, ExecuteScriptOptions, options, kwargs)

        data_lines = []
        if opts.auto_remove is not None:
            data_lines.append(f"autoRemove {wire_value(opts.auto_remove)}")
        if script:
            single_line = sanitize_script(script)
            if single_line:
                data_lines.append(f"script {single_line}")

        return self.send(EventType.EXECUTE_SCRIPT, data_lines, opts)

    async def read_signals(self, baseline: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Merge the signals sent with the bound request over ``baseline``."""
        return await read_signals(self.request, baseline, self.settings.signals_query_param)
