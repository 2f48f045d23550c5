"""Ciclo de vida do processo: bind, serviço, shutdown gracioso e fail-fast.

Estados: STARTING -> LISTENING -> SHUTTING_DOWN -> STOPPED (caminho gracioso),
STARTING -> FAILED (bind) e LISTENING/SHUTTING_DOWN -> FAILED (erro fatal).
"""
from __future__ import annotations
import errno
import signal
import socket
import threading
from enum import Enum
from typing import Any
from flask import Flask, got_request_exception
from werkzeug.serving import WSGIRequestHandler, make_server
from ..core.logging import get_logger

log = get_logger()

class LifecycleState(str, Enum):
    STARTING = "starting"
    LISTENING = "listening"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"
    FAILED = "failed"

_ALLOWED = {
    LifecycleState.STARTING: {LifecycleState.LISTENING, LifecycleState.FAILED},
    LifecycleState.LISTENING: {LifecycleState.SHUTTING_DOWN, LifecycleState.FAILED},
    LifecycleState.SHUTTING_DOWN: {LifecycleState.STOPPED, LifecycleState.FAILED},
}

class InFlightTracker:
    """Contador de requisições em voo, do primeiro byte recebido até a resposta escrita."""

    def __init__(self):
        self._cond = threading.Condition()
        self._active = 0

    def enter(self) -> None:
        with self._cond:
            self._active += 1

    def exit(self) -> None:
        with self._cond:
            self._active -= 1
            if self._active == 0:
                self._cond.notify_all()

    @property
    def active(self) -> int:
        with self._cond:
            return self._active

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Bloqueia até não haver requisições em voo. False se o prazo estourar."""
        with self._cond:
            return self._cond.wait_for(lambda: self._active == 0, timeout)

class TrackingRequestHandler(WSGIRequestHandler):
    """Handler que conta a requisição desde a chegada do primeiro byte na conexão.

    Conexões keep-alive ociosas não contam; uma requisição ainda sendo lida conta.
    """
    tracker: InFlightTracker

    def handle_one_request(self) -> None:
        if not self.rfile.peek(1):
            # EOF: o cliente fechou a conexão
            return super().handle_one_request()
        self.tracker.enter()
        try:
            super().handle_one_request()
        finally:
            self.tracker.exit()

class ServerLifecycle:
    """Dono do socket de escuta e do código de saída do processo.

    `run()` bloqueia até shutdown (sinal ou `request_shutdown`) ou erro fatal
    (`fail`) e devolve o exit code: 0 no caminho gracioso, 1 nos demais.
    """

    def __init__(self, app: Flask, host: str, port: int, drain_timeout_s: float = 30.0):
        self.app = app
        self.host = host
        self.port = port
        self.drain_timeout_s = drain_timeout_s
        self.tracker = InFlightTracker()
        self._handler = type("MenuRequestHandler", (TrackingRequestHandler,), {"tracker": self.tracker})
        got_request_exception.connect(self._on_request_exception, app)

        self.listening = threading.Event()
        self.bound_port: int | None = None
        self._state = LifecycleState.STARTING
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._exit_code = 0
        self._reason = ""
        self._pending_signal: str | None = None
        self._ignored_signals = 0
        self._server = None
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    def _transition(self, new: LifecycleState) -> None:
        with self._lock:
            self._transition_locked(new)

    def _transition_locked(self, new: LifecycleState) -> None:
        # chamador segura self._lock
        if new not in _ALLOWED.get(self._state, set()):
            raise RuntimeError(f"illegal lifecycle transition {self._state.value} -> {new.value}")
        log.debug("lifecycle_transition", old=self._state.value, new=new.value)
        self._state = new

    # --- gatilhos -----------------------------------------------------------

    def request_shutdown(self, reason: str = "requested") -> None:
        """Pede shutdown gracioso. Chamadas repetidas são ignoradas."""
        with self._lock:
            if self._stop.is_set():
                log.info("shutdown_already_requested", reason=reason)
                return
            self._reason = reason
            self._stop.set()

    def fail(self, exc: BaseException | None = None, reason: str = "fatal_error") -> None:
        """Fail-fast: registra o erro e encerra com exit code != 0."""
        log.error("fatal_error", reason=reason, error=repr(exc) if exc else None, state=self._state.value)
        with self._lock:
            self._exit_code = 1
            if self._state is LifecycleState.FAILED:
                return
            if LifecycleState.FAILED in _ALLOWED.get(self._state, set()):
                self._state = LifecycleState.FAILED
            if not self._reason:
                self._reason = reason
            self._stop.set()

    def _on_request_exception(self, sender: Flask, exception: BaseException, **extra: Any) -> None:
        self.fail(exception, reason="unhandled_request_exception")

    def _on_signal(self, signum, frame) -> None:
        # só atribuições aqui; o loop principal faz o resto
        if self._pending_signal is not None or self._stop.is_set():
            self._ignored_signals += 1
            return
        self._pending_signal = signal.Signals(signum).name

    def _on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        thread = args.thread.name if args.thread else "?"
        log.error("thread_exception", thread=thread, exc_info=(args.exc_type, args.exc_value, args.exc_traceback))
        self.fail(args.exc_value, reason="uncaught_thread_exception")

    # --- execução -----------------------------------------------------------

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        return socket.create_server((self.host, self.port), family=family, backlog=128)

    def run(self, install_signals: bool = True) -> int:
        """Faz o bind, serve até o shutdown e devolve o exit code."""
        try:
            sock = self._bind()
        except OSError as e:
            self._transition(LifecycleState.FAILED)
            log.error("bind_failed", host=self.host, port=self.port, errno=e.errno,
                      error=e.strerror or str(e),
                      reason="port already in use" if e.errno == errno.EADDRINUSE else "bind error")
            return 1
        with sock:
            self._server = make_server(self.host, self.port, self.app, threaded=True,
                                       request_handler=self._handler, fd=sock.fileno())
        self.bound_port = self._server.socket.getsockname()[1]

        previous: dict = {}
        if install_signals:
            for sig in (signal.SIGINT, signal.SIGTERM):
                previous[sig] = signal.signal(sig, self._on_signal)
        previous_hook = threading.excepthook
        threading.excepthook = self._on_thread_exception
        try:
            self._thread = threading.Thread(target=self._server.serve_forever, name="menu-http", daemon=True)
            self._thread.start()
            self._transition(LifecycleState.LISTENING)
            self.listening.set()
            log.info("server_listening", host=self.host, port=self.bound_port)
            log.info("menu_endpoint", url=f"http://localhost:{self.bound_port}/api/menu")

            while not self._stop.wait(0.2):
                if self._pending_signal is not None:
                    self.request_shutdown(f"signal:{self._pending_signal}")
            return self._shutdown()
        finally:
            threading.excepthook = previous_hook
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def _shutdown(self) -> int:
        with self._lock:
            # checagem e transição atômicas: fail() pode chegar de outra thread
            failed = self._state is LifecycleState.FAILED
            if not failed:
                self._transition_locked(LifecycleState.SHUTTING_DOWN)
        log.info("shutdown_started", reason=self._reason, in_flight=self.tracker.active)

        # para de aceitar conexões novas
        self._server.shutdown()
        if not failed:
            timeout = self.drain_timeout_s if self.drain_timeout_s > 0 else None
            if self.tracker.wait_idle(timeout):
                log.info("drain_complete")
            else:
                log.warning("drain_timeout", remaining=self.tracker.active, timeout_s=timeout)
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)

        with self._lock:
            code = self._exit_code
            if code == 0 and self._state is LifecycleState.SHUTTING_DOWN:
                self._state = LifecycleState.STOPPED
        if self._ignored_signals:
            log.info("signals_ignored", count=self._ignored_signals)
        log.info("server_stopped", exit_code=code, state=self._state.value)
        return code
