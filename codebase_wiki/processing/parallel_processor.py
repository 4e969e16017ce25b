"""Parallel per-file diagram generation."""

import multiprocessing as mp
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field

from loguru import logger
from tqdm import tqdm

from ..analysis.owasp import CategoryClassifier, KeywordCategoryClassifier, OwaspCategory
from ..diagrams.descriptors import DiagramDescriptor, DiagramShape
from ..diagrams.mermaid import to_mermaid
from ..diagrams.selector import DiagramSelector
from ..diagrams.signals import ControlFlowSignalExtractor, SignalOrigin
from ..errors import InputUnavailableError
from ..graph.node_types import ControlFlowGraph, FileInfo
from ..parsers.cfg_builder import CfgProvider
from ..utils.source_reader import SourceReader


@dataclass
class FileDocumentation:
    """Diagrams and categories produced for one file."""

    path: str
    shape: DiagramShape
    descriptors: tuple[DiagramDescriptor, ...]
    mermaid: list[str] = field(default_factory=list)
    owasp_categories: list[OwaspCategory] = field(default_factory=list)
    signal_origin: SignalOrigin | None = None
    cfg: ControlFlowGraph | None = None
    error: str | None = None


class FileDocumenter:
    """Documents individual files; safe to share between worker threads."""

    def __init__(
        self,
        reader: SourceReader | None = None,
        cfg_provider: CfgProvider | None = None,
        selector: DiagramSelector | None = None,
        signal_extractor: ControlFlowSignalExtractor | None = None,
        classifier: CategoryClassifier | None = None,
    ):
        self.reader = reader
        self.cfg_provider = cfg_provider
        self.selector = selector or DiagramSelector()
        self.signal_extractor = signal_extractor or ControlFlowSignalExtractor(reader=reader)
        self.classifier = classifier or KeywordCategoryClassifier()

    def document(self, file: FileInfo) -> FileDocumentation:
        """Document `file`; any failure degrades it to a class diagram."""
        try:
            return self._document(file)
        except Exception as e:
            logger.error(f"Error documenting {file.path}: {e}")
            fallback = DiagramSelector.class_diagram(file)
            return FileDocumentation(
                path=file.path,
                shape=DiagramShape.CLASS,
                descriptors=(fallback,),
                mermaid=[to_mermaid(fallback)],
                error=str(e),
            )

    def _document(self, file: FileInfo) -> FileDocumentation:
        text = self._read(file)
        cfg = self._build_cfg(file, text) if text is not None else None

        signals = self.signal_extractor.extract(file, cfg=cfg, source_text=text)
        diagrams = self.selector.render(file, signals, cfg=cfg, source_text=text)

        return FileDocumentation(
            path=file.path,
            shape=diagrams.shape,
            descriptors=diagrams.descriptors,
            mermaid=[to_mermaid(d) for d in diagrams.descriptors],
            owasp_categories=self.classifier.classify(text) if text else [],
            signal_origin=signals.origin,
            cfg=cfg,
        )

    def _read(self, file: FileInfo) -> str | None:
        if self.reader is None:
            return None
        try:
            return self.reader.read(file.path)
        except InputUnavailableError as e:
            logger.debug(f"No source text for {file.path}: {e.reason}")
            return None

    def _build_cfg(self, file: FileInfo, text: str) -> ControlFlowGraph | None:
        if self.cfg_provider is None:
            return None
        try:
            return self.cfg_provider.build(text, file.language)
        except InputUnavailableError as e:
            logger.debug(f"CFG unavailable for {file.path}: {e.reason}")
            return None


@dataclass
class ProcessingReport:
    """Results of one fan-out, in input order."""

    documents: list[FileDocumentation]
    skipped_files: list[str]
    elapsed_time: float

    @property
    def failed_files(self) -> list[str]:
        return [d.path for d in self.documents if d.error]


class ParallelProcessor:
    """Fans file documentation out over a thread pool."""

    def __init__(
        self,
        documenter: FileDocumenter,
        max_workers: int | None = None,
        deadline_seconds: float | None = None,
        show_progress: bool = True,
    ):
        self.documenter = documenter
        if max_workers is None:
            # Use 80% of CPU cores by default
            self.max_workers = max(1, int(mp.cpu_count() * 0.8))
        else:
            self.max_workers = max(1, max_workers)
        self.deadline_seconds = deadline_seconds
        self.show_progress = show_progress

        logger.info(f"Initialized ParallelProcessor with {self.max_workers} workers")

    def process_files(self, files: list[FileInfo]) -> ProcessingReport:
        """Document every file, stopping at the deadline if one is set.

        Files not finished by the deadline are listed in `skipped_files`;
        everything that completed is still returned.
        """
        start_time = time.time()
        if not files:
            logger.warning("No files to process")
            return ProcessingReport(documents=[], skipped_files=[], elapsed_time=0.0)

        results: dict[int, FileDocumentation] = {}
        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        future_to_index: dict[Future, int] = {
            executor.submit(self.documenter.document, file): i for i, file in enumerate(files)
        }

        timed_out = False
        with tqdm(total=len(files), desc="Documenting files", disable=not self.show_progress) as pbar:
            try:
                for future in as_completed(future_to_index, timeout=self.deadline_seconds):
                    index = future_to_index[future]
                    results[index] = future.result()
                    pbar.update(1)
            except FuturesTimeoutError:
                timed_out = True
                logger.warning(
                    f"Deadline of {self.deadline_seconds}s reached after "
                    f"{len(results)}/{len(files)} files"
                )
            finally:
                executor.shutdown(wait=not timed_out, cancel_futures=timed_out)

        documents = [results[i] for i in sorted(results)]
        skipped = [files[i].path for i in range(len(files)) if i not in results]

        elapsed_time = time.time() - start_time
        logger.info(
            f"Documented {len(documents)} files in {elapsed_time:.2f}s "
            f"({len(skipped)} skipped)"
        )
        return ProcessingReport(
            documents=documents, skipped_files=skipped, elapsed_time=elapsed_time
        )
