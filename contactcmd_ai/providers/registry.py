"""Registry of supported on-device models.

The registry is an explicit object built once by the caller and passed to
whatever needs model metadata. Downloading and deleting model files is handled
elsewhere; this module only knows where a model is expected to live.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from contactcmd_ai.config import LocalModelId, default_models_dir


@dataclass(frozen=True)
class LocalModel:
    """Information about a local model."""

    id: LocalModelId
    name: str
    description: str
    download_url: str
    file_size_bytes: int
    size_description: str
    min_ram_gb: int
    context_length: int
    requires_warning: bool = False

    @property
    def filename(self) -> str:
        """File name taken from the download URL."""
        return self.download_url.rsplit("/", 1)[-1] or "model.gguf"


DEFAULT_MODELS: tuple[LocalModel, ...] = (
    LocalModel(
        id=LocalModelId.QWEN3_4B,
        name="Qwen3 4B",
        description="Lightweight and fast, works on most machines",
        download_url=(
            "https://huggingface.co/Qwen/Qwen2.5-3B-Instruct-GGUF/resolve/main/qwen2.5-3b-instruct-q4_k_m.gguf"
        ),
        file_size_bytes=2_200_000_000,
        size_description="~2.75 GB",
        min_ram_gb=4,
        context_length=4096,
    ),
    LocalModel(
        id=LocalModelId.GEMMA3N_E4B,
        name="Gemma 3n E4B",
        description="Good quality, vision-capable model",
        download_url="https://huggingface.co/google/gemma-2-9b-it-GGUF/resolve/main/gemma-2-9b-it-Q4_K_M.gguf",
        file_size_bytes=5_500_000_000,
        size_description="~5.5 GB",
        min_ram_gb=8,
        context_length=8192,
    ),
    LocalModel(
        id=LocalModelId.LLAMA31_8B,
        name="Llama 3.1 8B",
        description="Popular, well-supported model",
        download_url=(
            "https://huggingface.co/lmstudio-community/Meta-Llama-3.1-8B-Instruct-GGUF"
            "/resolve/main/Meta-Llama-3.1-8B-Instruct-Q4_K_M.gguf"
        ),
        file_size_bytes=4_920_000_000,
        size_description="~6-7 GB",
        min_ram_gb=8,
        context_length=8192,
    ),
    LocalModel(
        id=LocalModelId.MAGISTRAL_SMALL_24B,
        name="Magistral Small 24B",
        description="High quality, requires significant RAM",
        download_url=(
            "https://huggingface.co/mistralai/Mistral-Small-3.1-24B-Instruct-2503-GGUF"
            "/resolve/main/Mistral-Small-3.1-24B-Instruct-2503-Q4_K_M.gguf"
        ),
        file_size_bytes=13_000_000_000,
        size_description="~13 GB",
        min_ram_gb=16,
        context_length=32768,
        requires_warning=True,
    ),
)


class ModelRegistry:
    """Lookup of local model metadata and on-disk locations."""

    def __init__(self, models: Iterable[LocalModel], models_dir: Path | None = None):
        self._models: dict[LocalModelId, LocalModel] = {model.id: model for model in models}
        self.models_dir = models_dir or default_models_dir()

    @classmethod
    def default(cls, models_dir: Path | None = None) -> "ModelRegistry":
        """Registry with the standard set of supported models."""
        return cls(DEFAULT_MODELS, models_dir)

    def get(self, model_id: LocalModelId) -> LocalModel | None:
        return self._models.get(model_id)

    def all(self) -> list[LocalModel]:
        """All models, in LocalModelId declaration order."""
        return [self._models[model_id] for model_id in LocalModelId if model_id in self._models]

    def filename(self, model: LocalModel) -> str:
        return model.filename

    def local_path(self, model: LocalModel) -> Path:
        return self.models_dir / self.filename(model)

    def is_downloaded(self, model: LocalModel) -> bool:
        return self.local_path(model).exists()

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __len__(self) -> int:
        return len(self._models)
