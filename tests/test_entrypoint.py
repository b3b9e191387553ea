from unittest.mock import MagicMock

import entrypoint


def test_main_runs_uvicorn_from_env(monkeypatch):
    run = MagicMock()
    monkeypatch.setattr(entrypoint.uvicorn, 'run', run)
    monkeypatch.setenv('HOST', '127.0.0.1')
    monkeypatch.setenv('PORT', '9001')
    monkeypatch.setenv('RELOAD', 'true')

    entrypoint.main()

    run.assert_called_once_with('app:app', host='127.0.0.1', port=9001, reload=True, log_config=None)
