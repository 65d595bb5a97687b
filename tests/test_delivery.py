from __future__ import annotations

import json

import pytest

from session_core.delivery import upload_snapshot
from session_core.storage import session_log_path

from fakes import COLLECTOR_URL, FakeResponse


def _session_file(pipeline):
    setup = pipeline.setup
    return session_log_path(setup.storage_path, pipeline._aggregator.state.file_token)


def test_local_file_named_by_session_start_minute(make_setup, make_pipeline, fake_http) -> None:
    fake_http.default = FakeResponse(500)
    pipeline = make_pipeline(make_setup())
    pipeline.save_and_send()

    path = _session_file(pipeline)
    assert path.name == "19_10_26_14_05_SessionLog.json"
    assert path.exists()


def test_success_posts_json_and_deletes_file(make_setup, make_pipeline, fake_http) -> None:
    pipeline = make_pipeline(make_setup())
    pipeline._aggregator.record_event("ItemCollected")
    results = []

    pipeline.save_and_send(results.append)

    assert results == [True]
    assert not _session_file(pipeline).exists()
    post = fake_http.posts[0]
    assert post["url"] == COLLECTOR_URL
    assert post["headers"]["Content-Type"] == "application/json"
    body = json.loads(post["data"].decode("utf-8"))
    assert body["ActionsReceived"][2] == {"actionName": "ItemCollected", "count": 1}


@pytest.mark.parametrize("status", [201, 204, 299])
def test_any_2xx_counts_as_success(make_setup, make_pipeline, fake_http, status) -> None:
    fake_http.default = FakeResponse(status)
    pipeline = make_pipeline(make_setup())
    results = []
    pipeline.save_and_send(results.append)

    assert results == [True]
    assert not _session_file(pipeline).exists()


@pytest.mark.parametrize("status", [301, 400, 401, 500, 503])
def test_non_2xx_keeps_file_for_retry(make_setup, make_pipeline, fake_http, status) -> None:
    fake_http.default = FakeResponse(status, "nope")
    pipeline = make_pipeline(make_setup())
    results = []
    pipeline.save_and_send(results.append)

    assert results == [False]
    assert _session_file(pipeline).exists()


def test_network_error_keeps_file_and_never_raises(make_setup, make_pipeline, fake_http, connection_error) -> None:
    fake_http.queue(connection_error)
    pipeline = make_pipeline(make_setup())
    results = []
    pipeline.save_and_send(results.append)

    assert results == [False]
    assert _session_file(pipeline).exists()


def test_failed_post_then_retry_deletes_only_after_2xx(make_setup, make_pipeline, fake_http, connection_error) -> None:
    fake_http.queue(connection_error, FakeResponse(502), FakeResponse(200))
    pipeline = make_pipeline(make_setup())
    path = _session_file(pipeline)

    pipeline.save_and_send()
    assert path.exists()
    pipeline.save_and_send()
    assert path.exists()
    pipeline.save_and_send()
    assert not path.exists()

    bodies = [json.loads(p["data"]) for p in fake_http.posts]
    assert len(bodies) == 3
    assert {b["sessionStart"] for b in bodies} == {bodies[0]["sessionStart"]}


def test_periodic_saves_overwrite_same_file(make_setup, make_pipeline, tmp_path) -> None:
    pipeline = make_pipeline(make_setup(send=False))
    pipeline.save_and_send()
    pipeline._aggregator.record_event("TaskComplete")
    pipeline.save_and_send()

    files = list((tmp_path / "store").iterdir())
    assert len(files) == 1
    data = json.loads(files[0].read_text(encoding="utf-8"))
    assert data["ActionsReceived"][3] == {"actionName": "TaskComplete", "count": 1}


def test_save_only_reports_local_result(make_setup, make_pipeline, fake_http) -> None:
    pipeline = make_pipeline(make_setup(save=True, send=False))
    results = []
    pipeline.save_and_send(results.append)

    assert results == [True]
    assert fake_http.posts == []
    assert _session_file(pipeline).exists()


def test_send_only_posts_without_writing(make_setup, make_pipeline, fake_http, tmp_path) -> None:
    pipeline = make_pipeline(make_setup(save=False, send=True))
    results = []
    pipeline.save_and_send(results.append)

    assert results == [True]
    assert len(fake_http.posts) == 1
    assert not (tmp_path / "store").exists()


def test_nothing_enabled_is_a_noop(make_setup, make_pipeline, fake_http, tmp_path) -> None:
    pipeline = make_pipeline(make_setup(save=False, send=False))
    results = []
    pipeline.save_and_send(results.append)

    assert results == [False]
    assert fake_http.posts == []
    assert not (tmp_path / "store").exists()


def test_missing_server_url_fails_without_network_call(make_setup, make_pipeline, fake_http) -> None:
    pipeline = make_pipeline(make_setup(server_url=""))
    results = []
    pipeline.save_and_send(results.append)

    assert results == [False]
    assert fake_http.posts == []
    assert _session_file(pipeline).exists()


def test_failed_local_write_skips_upload(make_setup, make_pipeline, fake_http, tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    pipeline = make_pipeline(make_setup(storage_dir=str(blocker)))
    results = []
    pipeline.save_and_send(results.append)

    assert results == [False]
    assert fake_http.posts == []


def test_auth_header_sent_only_when_key_and_name_set(make_setup, fake_http) -> None:
    upload_snapshot(make_setup(api_key="s3cret", api_key_header="X-Collector-Key"), "{}")
    upload_snapshot(make_setup(api_key="", api_key_header="X-Collector-Key"), "{}")
    upload_snapshot(make_setup(api_key="s3cret", api_key_header=""), "{}")

    assert fake_http.posts[0]["headers"]["X-Collector-Key"] == "s3cret"
    assert "X-Collector-Key" not in fake_http.posts[1]["headers"]
    assert set(fake_http.posts[2]["headers"]) == {"Content-Type"}


def test_upload_has_no_timeout_unless_configured(make_setup, fake_http) -> None:
    upload_snapshot(make_setup(), "{}")
    upload_snapshot(make_setup(request_timeout=7.5), "{}")
    assert [p["timeout"] for p in fake_http.posts] == [None, 7.5]


def test_overlapping_attempts_each_complete(make_setup, make_pipeline, fake_http, deferred) -> None:
    pipeline = make_pipeline(make_setup(), spawn=deferred)
    results = []
    pipeline.save_and_send(results.append)
    pipeline.save_and_send(results.append)

    assert pipeline.in_flight == 2
    assert results == []

    deferred.run_all()

    assert results == [True, True]
    assert pipeline.in_flight == 0
    assert len(fake_http.posts) == 2
    assert not _session_file(pipeline).exists()


def test_older_success_keeps_file_rewritten_by_newer_attempt(make_setup, make_pipeline, fake_http, deferred, connection_error) -> None:
    fake_http.queue(FakeResponse(200), connection_error)
    pipeline = make_pipeline(make_setup(), spawn=deferred)
    path = _session_file(pipeline)

    pipeline.save_and_send()
    pipeline._aggregator.record_event("BossDefeated")
    newer = []
    pipeline.save_and_send(newer.append)
    deferred.run_all()

    assert newer == [False]
    assert path.exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["ActionsReceived"][4] == {"actionName": "BossDefeated", "count": 1}


def test_newer_success_deletes_file_after_older_failure(make_setup, make_pipeline, fake_http, deferred, connection_error) -> None:
    fake_http.queue(connection_error, FakeResponse(200))
    pipeline = make_pipeline(make_setup(), spawn=deferred)

    pipeline.save_and_send()
    pipeline.save_and_send()
    deferred.run_all()

    assert not _session_file(pipeline).exists()


def test_completion_runs_on_loop_when_finished_off_thread(make_setup, make_pipeline, fake_http, loop) -> None:
    import threading

    workers = []

    def thread_spawn(target):
        worker = threading.Thread(target=target)
        workers.append(worker)
        worker.start()

    pipeline = make_pipeline(make_setup(), spawn=thread_spawn)
    results = []
    pipeline.save_and_send(results.append)
    for worker in workers:
        worker.join(timeout=5)

    assert results == []
    loop.run_pending()
    assert results == [True]


def test_callback_errors_are_contained(make_setup, make_pipeline, fake_http) -> None:
    pipeline = make_pipeline(make_setup())

    def explode(ok):
        raise RuntimeError("host callback broke")

    pipeline.save_and_send(explode)
    assert len(fake_http.posts) == 1
