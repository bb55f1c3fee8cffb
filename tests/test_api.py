"""HTTP API tests with the service overridden to in-memory collaborators."""
from continuation_visualizer.data.sample_programs import SAMPLE_PROGRAMS


def create(client):
    response = client.post("/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


class TestSessionEndpoints:
    def test_get_new_session(self, client):
        session_id = create(client)
        body = client.get(f"/sessions/{session_id}").json()

        assert body["cursor"] == 0
        assert body["line_count"] == 0
        assert body["towers"] == []
        assert body["reset_marker"] is None

    def test_unknown_session_is_404(self, client):
        assert client.get("/sessions/missing").status_code == 404
        assert client.post("/sessions/missing/step").status_code == 404
        assert client.post("/sessions/missing/reset").status_code == 404
        assert client.post("/sessions/missing/trace", json={"text": ""}).status_code == 404

    def test_delete(self, client):
        session_id = create(client)

        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.delete(f"/sessions/{session_id}").status_code == 404


class TestReplayEndpoints:
    def test_trace_step_and_reset(self, client):
        session_id = create(client)
        client.post(f"/sessions/{session_id}/trace", json={"text": "push (+ 1 2)\npop (+ 1 2) => 3\n3\n"})

        body = client.post(f"/sessions/{session_id}/step").json()
        assert body["outcome"] == "APPLIED"
        frame = body["session"]["towers"][0]["frames"][0]
        assert frame["name"] == "(main)"
        assert frame["items"][0]["value"] == "(+ 1 2)"

        client.post(f"/sessions/{session_id}/step")
        body = client.post(f"/sessions/{session_id}/step").json()
        assert body["session"]["output"] == ["3"]
        assert body["session"]["towers"] == []

        assert client.post(f"/sessions/{session_id}/step").json()["outcome"] == "FINISHED"

        body = client.post(f"/sessions/{session_id}/reset").json()
        assert body["cursor"] == 0
        assert body["output"] == []
        assert body["line_count"] == 3


class TestExecuteEndpoint:
    def test_execute_sample(self, client):
        session_id = create(client)
        program = SAMPLE_PROGRAMS["shift_reset_basic"]

        response = client.post(f"/sessions/{session_id}/execute", json={"code": program.code})

        assert response.status_code == 200
        assert response.json()["line_count"] == len(program.trace.strip().splitlines())
        latest = client.get("/traces/latest").json()
        assert latest["source"] == program.code

    def test_evaluator_failure(self, client):
        session_id = create(client)

        response = client.post(f"/sessions/{session_id}/execute", json={"code": "(unknown)"})

        assert response.status_code == 502
        assert client.get(f"/sessions/{session_id}").json()["line_count"] == 0

    def test_empty_code(self, client):
        session_id = create(client)

        assert client.post(f"/sessions/{session_id}/execute", json={"code": "  "}).status_code == 400

    def test_no_trace_recorded(self, client):
        assert client.get("/traces/latest").status_code == 404


class TestSamples:
    def test_lists_bundled_programs(self, client):
        ids = [sample["id"] for sample in client.get("/samples").json()]

        assert "callcc_basic" in ids
        assert "shift_reset_basic" in ids
