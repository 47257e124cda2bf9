# conllview/render.py
import logging
import subprocess

from conllview.errors import ExternalRendererIOFailure, ExternalRendererSpawnFailure

logger = logging.getLogger(__name__)

DEFAULT_DOT_COMMAND = "dot"


def dot_to_svg(dot: str, command: str = DEFAULT_DOT_COMMAND) -> str:
    """
    Рендерит DOT в SVG внешним процессом Graphviz (`dot -Tsvg`).

    Один блокирующий запрос-ответ: DOT уходит в stdin, SVG читается из stdout.
    Без таймаута и без повторов.

    Raises:
        ExternalRendererSpawnFailure: команду не удалось запустить.
        ExternalRendererIOFailure: процесс завершился с ошибкой или сломался обмен.
    """
    logger.debug(f"Rendering {len(dot)} chars of DOT with '{command} -Tsvg'")

    try:
        result = subprocess.run(
            [command, "-Tsvg"],
            input=dot,
            capture_output=True,
            encoding="utf-8",
            check=True,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise ExternalRendererSpawnFailure(f"Cannot start renderer '{command}': {e}") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise ExternalRendererIOFailure(
            f"Renderer '{command}' exited with status {e.returncode}: {stderr[:200]}",
            stderr=stderr,
        ) from e
    except OSError as e:
        raise ExternalRendererIOFailure(f"I/O error while talking to renderer '{command}': {e}") from e

    return result.stdout
