import asyncio
import inspect
import warnings
from typing import Any, Callable

from logan.errors import PersistenceWarning

# 실행 중인 백그라운드 태스크 참조 (GC로 사라지지 않도록 보관)
_background_tasks = set()


def _report(label: str, exc: Exception) -> None:
    print(f"⚠️ [{label}] 백그라운드 작업 실패: {exc}")
    warnings.warn(f"{label} failed: {exc}", PersistenceWarning)


def _run_sync(func: Callable, label: str, args, kwargs) -> Any:
    try:
        return func(*args, **kwargs)
    except Exception as e:
        _report(label, e)
        return None


async def _run_async(func: Callable, label: str, args, kwargs) -> Any:
    try:
        return await func(*args, **kwargs)
    except Exception as e:
        _report(label, e)
        return None


def fire_and_forget(func: Callable, *args, label: str = "background", **kwargs):
    """
    결과를 기다리지 않는 부가 작업을 실행합니다. 실패는 출력만 하고 호출자에게 전파하지 않습니다.

    - 이벤트 루프 안: 코루틴 함수는 태스크로, 일반 함수는 executor 스레드로 보냅니다.
    - 이벤트 루프 밖 (스레드풀에서 실행되는 동기 엔드포인트 등): 그 자리에서 실행합니다.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if inspect.iscoroutinefunction(func):
        coro = _run_async(func, label, args, kwargs)
        if loop is None:
            return asyncio.run(coro)
        task = loop.create_task(coro)
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
        return task

    if loop is None:
        return _run_sync(func, label, args, kwargs)
    return loop.run_in_executor(None, _run_sync, func, label, args, kwargs)


async def with_timeout(awaitable, default: Any, seconds: float, label: str = "memory"):
    """부가 조회를 timeout과 경쟁시킵니다. 시간 초과나 오류면 default."""
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError:
        print(f"⏱️ [{label}] {seconds}초 안에 응답이 없어 기본값을 사용합니다.")
        return default
    except Exception as e:
        print(f"⚠️ [{label}] 조회 실패, 기본값을 사용합니다: {e}")
        return default
