"""Service orchestration for home-semantics."""

import hashlib
import logging
import signal
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from home_semantics.config import CatalogConfig, SemanticsAppConfig
from home_semantics.domain.models import Item, MetadataEvent
from home_semantics.items.loader import ItemModelError, load_item_model
from home_semantics.items.provider import InMemoryItemRegistry, ItemRegistryError
from home_semantics.observability.health import HealthServer, create_health_checker
from home_semantics.observability.logging import get_logger, setup_logging
from home_semantics.observability.metrics import METRICS, MetricsServer
from home_semantics.semantic.resolver import SemanticTypeResolver
from home_semantics.state.metadata_cache import SemanticsMetadataCache
from home_semantics.tags.catalog import CatalogError, load_catalog, load_default_catalog
from home_semantics.tags.registry import TagRegistry

logger = logging.getLogger(__name__)

# Structured log of every metadata change
event_logger = get_logger("home_semantics.events")


def build_registry(config: CatalogConfig) -> TagRegistry:
    """Load the configured catalog into a tag registry.

    Raises:
        CatalogError: If the catalog is invalid, or has suffix collisions while
            ``fail_on_collisions`` is set.
    """
    catalog = load_catalog(config.path) if config.path else load_default_catalog()
    registry = TagRegistry(catalog)

    collisions = registry.collisions()
    if collisions and config.fail_on_collisions:
        raise CatalogError(
            "Ambiguous tag suffixes: " + ", ".join(c.suffix for c in collisions)
        )
    return registry


class ModelFileHandler(FileSystemEventHandler):
    """File system event handler for the item model file."""

    def __init__(
        self,
        path: Path,
        callback: Callable[[Path], None],
        debounce_seconds: float,
    ):
        """Initialize the handler.

        Args:
            path: The model file to watch.
            callback: Function to call when the file changes.
            debounce_seconds: Debounce interval for rapid changes.
        """
        self.path = path.resolve()
        self.callback = callback
        self.debounce = debounce_seconds
        self._last_event = 0.0
        self._lock = threading.Lock()

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Handle file system events."""
        if event.is_directory:
            return

        paths = [Path(str(event.src_path))]
        dest = getattr(event, "dest_path", None)
        if dest:
            paths.append(Path(str(dest)))
        if not any(p.resolve() == self.path for p in paths):
            return

        # Debounce rapid events
        with self._lock:
            now = time.time()
            if now - self._last_event < self.debounce:
                return
            self._last_event = now

        # Delay callback to allow file writes to complete
        def delayed_callback() -> None:
            time.sleep(self.debounce)
            if self.path.exists():
                try:
                    self.callback(self.path)
                except Exception as e:
                    logger.error("Error reloading %s: %s", self.path, e)

        threading.Thread(target=delayed_callback, daemon=True).start()


class SemanticsService:
    """Builds the registry, loads the item model and runs the metadata cache."""

    def __init__(self, config: SemanticsAppConfig):
        """Initialize the service.

        Args:
            config: Service configuration.

        Raises:
            CatalogError: If the tag catalog is invalid. Startup halts before
                any item is processed.
        """
        self.config = config
        self._shutdown = threading.Event()
        self._model_hash: str | None = None

        self._init_logging()

        self.registry = build_registry(config.catalog)
        self.resolver = SemanticTypeResolver(self.registry)
        self.items = InMemoryItemRegistry(self._initial_items())
        self.cache = SemanticsMetadataCache(
            self.resolver,
            self.items,
            refresh_neighbors=config.semantics.refresh_neighbors,
        )
        self.cache.subscribe(self._log_event)

        # Observability servers
        self.metrics_server = MetricsServer(config.observability.metrics_port)
        self.health_server = HealthServer(
            config.observability.health_port,
            check_func=create_health_checker(self.cache, self.items),
        )

        # File watcher
        self._observer: Any | None = None
        if config.items.watch:
            self._setup_file_watcher()

    def _init_logging(self) -> None:
        """Initialize logging configuration."""
        setup_logging(
            level=self.config.observability.log_level,
            format_type=self.config.observability.log_format,
        )

    def _initial_items(self) -> list[Item]:
        path = self.config.items.model_file
        if not path.exists():
            logger.warning("Item model file not found: %s, starting empty", path)
            return []
        self._model_hash = self._compute_file_hash(path)
        return load_item_model(path)

    def _setup_file_watcher(self) -> None:
        """Set up the file system watcher."""
        model_file = self.config.items.model_file
        watch_dir = model_file.resolve().parent
        watch_dir.mkdir(parents=True, exist_ok=True)

        handler = ModelFileHandler(
            model_file,
            callback=self._reload_model,
            debounce_seconds=self.config.items.debounce_seconds,
        )

        self._observer = Observer()
        self._observer.schedule(handler, str(watch_dir), recursive=False)

    def _compute_file_hash(self, path: Path) -> str:
        """Compute SHA256 hash of a file."""
        hasher = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                hasher.update(chunk)
        return hasher.hexdigest()

    def _reload_model(self, path: Path) -> None:
        """Reload the item model and apply the differences."""
        current_hash = self._compute_file_hash(path)
        if current_hash == self._model_hash:
            logger.debug("Model file unchanged, skipping: %s", path)
            return

        try:
            items = load_item_model(path)
            added, updated, removed = self.items.replace_all(items)
        except (ItemModelError, ItemRegistryError) as e:
            logger.error("Failed to reload item model %s: %s", path, e)
            METRICS.item_model_reloads_total.labels(result="failure").inc()
            return

        self._model_hash = current_hash
        METRICS.item_model_reloads_total.labels(result="success").inc()
        logger.info(
            "Reloaded %s: %d added, %d updated, %d removed", path, added, updated, removed
        )

    def _log_event(self, event: MetadataEvent) -> None:
        event_logger.info(
            "semantic_metadata_changed",
            kind=event.kind.value,
            item=event.metadata.item_name,
            semantic_type=event.metadata.semantic_type,
            relations=dict(event.metadata.relations),
        )

    def start(self) -> None:
        """Start the service."""
        logger.info("Starting home-semantics service")

        self.metrics_server.start()
        self.health_server.start()

        self.cache.start()

        if self._observer:
            self._observer.start()
            logger.info("Watching item model %s", self.config.items.model_file)

    def run(self) -> None:
        """Run until shut down."""
        self.start()
        try:
            while not self._shutdown.is_set():
                self._shutdown.wait(1.0)
        except KeyboardInterrupt:
            logger.info("Received interrupt signal")

        self.shutdown()

    def shutdown(self) -> None:
        """Gracefully shut down the service."""
        logger.info("Shutting down home-semantics service")
        self._shutdown.set()

        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)

        self.cache.stop()

        self.health_server.stop()
        self.metrics_server.stop()

        logger.info("Service shutdown complete")


def run_service(config: SemanticsAppConfig) -> None:
    """Run the semantics service.

    Args:
        config: Service configuration.
    """
    service = SemanticsService(config)

    def signal_handler(signum: int, frame: Any) -> None:
        logger.info("Received signal %d", signum)
        service._shutdown.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    service.run()
