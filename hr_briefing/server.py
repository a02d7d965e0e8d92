# File: hr_briefing/server.py
"""HTTP trigger for scheduled runs (cron hits GET /api/cron)"""
from datetime import datetime, timezone
from typing import Awaitable, Callable

from aiohttp import web

from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

SUCCESS_MESSAGE = '뉴스 수집 및 요약이 완료되었습니다.'

PipelineRunner = Callable[[], Awaitable[object]]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_handler(runner: PipelineRunner, method: str):
    async def handler(request: web.Request) -> web.Response:
        if request.method != method:
            return web.json_response({'error': 'Method not allowed'}, status=405)

        logger.info(f"Pipeline triggered via {request.method} {request.path}")
        try:
            await runner()
        except Exception as e:
            logger.exception(f"Triggered run failed: {e}")
            return web.json_response(
                {'success': False, 'error': str(e) or type(e).__name__, 'timestamp': _timestamp()},
                status=500
            )

        return web.json_response({'success': True, 'message': SUCCESS_MESSAGE, 'timestamp': _timestamp()})

    return handler


def create_app(runner: PipelineRunner = None) -> web.Application:
    if runner is None:
        from hr_briefing.main import run_pipeline
        runner = run_pipeline

    app = web.Application()
    # Routes accept any method so the handlers can answer 405 themselves
    app.router.add_route('*', '/api/cron', make_handler(runner, 'GET'))
    app.router.add_route('*', '/api/run', make_handler(runner, 'POST'))
    return app


def serve(port: int = 8080):
    web.run_app(create_app(), port=port)
