# --- tests/test_api.py ---
import httpx
import pytest
from fastapi.testclient import TestClient

from vlab_core import AppSettings
from vlab_core.analysis import ReactionAnalysisService
from vlab_core.api import AppContext, create_app


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def default_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=gemini_reply("Reaction: NaCl and water form.\nAnalysis: neutralization."))


@pytest.fixture
def make_client(tmp_path, fixed_clock):
    """Builds a TestClient around a fresh AppContext whose history lives under tmp_path."""
    def _make(handler=default_handler, **settings_overrides):
        settings_kwargs = {"gemini_api_key": "test-key", "history_dir": tmp_path}
        settings_kwargs.update(settings_overrides)
        settings = AppSettings(**settings_kwargs)
        service = ReactionAnalysisService(
            settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
        context = AppContext(settings=settings, analysis_service=service, clock=fixed_clock)
        return TestClient(create_app(context=context))
    return _make


@pytest.fixture
def client(make_client):
    with make_client() as test_client:
        yield test_client


class TestHealthAndErrors:

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "model": "gemini-1.5-flash", "hasKey": True}

    def test_health_without_key(self, make_client):
        with make_client(gemini_api_key=None) as test_client:
            assert test_client.get("/api/health").json()["hasKey"] is False

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "path": "/api/nothing-here"}

    def test_cors_allows_any_origin(self, client):
        response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestGeminiProxy:

    def test_analysis(self, client):
        response = client.post("/api/gemini", json={"reactantNames": ["Hydrochloric Acid (10ml)",
                                                                      "Sodium Hydroxide (10ml)"]})
        assert response.status_code == 200
        assert response.json() == {"result": "Reaction: NaCl and water form.", "analysis": "neutralization."}

    def test_meta_is_accepted(self, client):
        response = client.post("/api/gemini", json={
            "reactantNames": ["Water (10ml)", "__CONTEXT__ Temperature=25C"],
            "meta": {"temperatureC": 25},
        })
        assert response.status_code == 200

    @pytest.mark.parametrize("body", [{}, {"reactantNames": []}, {"reactantNames": "Water"}, ["Water"]])
    def test_invalid_body(self, client, body):
        response = client.post("/api/gemini", json=body)
        assert response.status_code == 400
        assert "reactantNames" in response.json()["error"]

    def test_non_string_reactant(self, client):
        response = client.post("/api/gemini", json={"reactantNames": ["Water", 7]})
        assert response.status_code == 400
        assert response.json() == {"error": "Each reactant name must be a string"}

    def test_missing_key(self, make_client):
        with make_client(gemini_api_key=None) as test_client:
            response = test_client.post("/api/gemini", json={"reactantNames": ["Water"]})
        assert response.status_code == 500
        assert response.json() == {"error": "GEMINI_API_KEY missing in environment"}

    def test_upstream_status_is_mirrored(self, make_client):
        handler = lambda request: httpx.Response(429, json={"error": "quota"})
        with make_client(handler=handler) as test_client:
            response = test_client.post("/api/gemini", json={"reactantNames": ["Water"]})
        assert response.status_code == 429
        assert response.json() == {"error": "Gemini API request failed", "status": 429,
                                   "details": {"error": "quota"}}

    def test_timeout(self, make_client):
        def handler(request):
            raise httpx.ConnectTimeout("too slow", request=request)

        with make_client(handler=handler) as test_client:
            response = test_client.post("/api/gemini", json={"reactantNames": ["Water"]})
        assert response.status_code == 504
        assert response.json() == {"error": "Gemini request timed out"}

    def test_fallback_model_is_reported(self, make_client):
        def handler(request):
            if "gemini-legacy" in request.url.path:
                return httpx.Response(404, json={})
            return default_handler(request)

        with make_client(handler=handler, gemini_model="gemini-legacy") as test_client:
            body = test_client.post("/api/gemini", json={"reactantNames": ["Water"]}).json()
        assert body["modelUsed"] == "gemini-1.5-flash"

    def test_development_mode_includes_raw(self, make_client):
        with make_client(development=True) as test_client:
            body = test_client.post("/api/gemini", json={"reactantNames": ["Water"]}).json()
        assert body["raw"]["candidates"][0]["content"]["parts"][0]["text"].startswith("Reaction:")


class TestLabsApi:

    def test_list_labs(self, client):
        assert client.get("/api/labs").json() == {"labs": ["chemistry", "physics", "biology"]}

    def test_categories(self, client):
        body = client.get("/api/labs/biology/categories").json()
        assert body["lab"] == "biology"
        assert body["categories"][:3] == ["all", "Cellular", "Enzyme"]
        assert "Genetics" in body["categories"]

    def test_list_simulations(self, client):
        body = client.get("/api/labs/physics/simulations").json()
        assert body["count"] == 100
        assert body["simulations"][0] == {
            "id": "sim01",
            "name": "Uniform Acceleration (Displacement)",
            "category": "Kinematics",
            "description": "Displacement under constant acceleration: s = v0 t + 1/2 a t^2",
        }

    def test_filter_simulations(self, client):
        body = client.get("/api/labs/biology/simulations", params={"text": "MITOSIS"}).json()
        assert [s["id"] for s in body["simulations"]] == ["bio13"]
        body = client.get("/api/labs/biology/simulations", params={"category": "Genetics"}).json()
        assert body["count"] == 2
        body = client.get("/api/labs/biology/simulations", params={"text": "mitosis", "category": "Genetics"}).json()
        assert body == {"lab": "biology", "count": 0, "simulations": []}

    def test_simulation_detail(self, client):
        body = client.get("/api/labs/physics/simulations/sim03").json()
        assert body["formula"] == "KE = 1/2 m v^2"
        assert body["variables"] == [
            {"key": "m", "label": "Mass", "unit": "kg", "min": 0.0, "max": 200.0, "default": 10.0, "step": None},
            {"key": "v", "label": "Velocity", "unit": "m/s", "min": 0.0, "max": 100.0, "default": 15.0, "step": None},
        ]
        assert body["outputs"] == [{"key": "KE", "label": "Kinetic Energy", "unit": "J"}]

    def test_evaluate_defaults(self, client):
        response = client.post("/api/labs/physics/simulations/sim15/evaluate")
        assert response.status_code == 200
        assert response.json() == {
            "variables": {"I": 2.0, "R": 120.0},
            "outputs": {"V": 240.0},
            "display": {"V": "240"},
        }

    def test_evaluate_with_overrides(self, client):
        body = client.post("/api/labs/physics/simulations/sim03/evaluate",
                           json={"variables": {"v": 20}}).json()
        assert body["variables"] == {"m": 10.0, "v": 20.0}
        assert body["outputs"]["KE"] == pytest.approx(2000.0)
        assert body["display"]["KE"] == "2.00e+3"

    def test_evaluate_non_finite_output(self, client):
        body = client.post("/api/labs/physics/simulations/sim100/evaluate",
                           json={"variables": {"lam_nm": 800, "d_um": 0.1, "m": 10}}).json()
        assert body["outputs"]["theta"] is None
        assert body["display"]["theta"] == "—"

    def test_evaluate_unknown_variable(self, client):
        response = client.post("/api/labs/physics/simulations/sim03/evaluate",
                               json={"variables": {"mass": 3}})
        assert response.status_code == 422
        assert response.json()["key"] == "mass"

    def test_unknown_simulation(self, client):
        response = client.get("/api/labs/physics/simulations/sim999")
        assert response.status_code == 404
        assert response.json() == {"error": "Unknown simulation 'sim999'", "lab": "physics", "id": "sim999"}

    @pytest.mark.parametrize("lab", ["chemistry", "astronomy"])
    def test_non_simulation_lab(self, client, lab):
        response = client.get(f"/api/labs/{lab}/simulations")
        assert response.status_code == 404
        assert response.json() == {"error": f"Unknown simulation lab '{lab}'", "lab": lab}


class TestChemistryApi:

    def test_list_chemicals(self, client):
        body = client.get("/api/labs/chemistry/chemicals").json()
        assert body["count"] == 30
        assert body["chemicals"][0] == {
            "id": 1, "name": "Water", "formula": "H2O", "description": "Universal solvent.",
            "ph": 1.0, "concentration": 0.1,
        }

    def test_search_chemicals(self, client):
        body = client.get("/api/labs/chemistry/chemicals", params={"text": "nitrate"}).json()
        assert {c["formula"] for c in body["chemicals"]} == {"AgNO3", "Pb(NO3)2", "KNO3", "NaNO3"}

    def test_mixture_with_known_reaction(self, client):
        body = client.post("/api/labs/chemistry/mixture", json={
            "items": [{"id": 4, "volume": 20}, {"id": 3}],
            "temperatureC": 30,
            "heating": True,
        }).json()
        assert body["reaction"] == {
            "reactants": [3, 4],
            "description": "Neutralization of HCl and NaOH produces water and salt.",
            "products": [1, 2],
        }
        names = body["request"]["reactantNames"]
        assert names[:2] == ["Sodium Hydroxide (20ml)", "Hydrochloric Acid (10ml)"]
        assert names[2].startswith("__CONTEXT__ Temperature=30C; Heating=Yes; pH=")
        assert body["request"]["meta"]["volumes"] == {"Sodium Hydroxide": 20.0, "Hydrochloric Acid": 10.0}

    def test_single_chemical_has_no_reaction(self, client):
        body = client.post("/api/labs/chemistry/mixture", json={"items": [{"id": 1}]}).json()
        assert body["reaction"] is None
        assert body["ph"] == pytest.approx(6.4)

    def test_unknown_chemical(self, client):
        response = client.post("/api/labs/chemistry/mixture", json={"items": [{"id": 99}]})
        assert response.status_code == 404
        assert response.json()["id"] == 99

    def test_non_positive_volume_is_rejected(self, client):
        response = client.post("/api/labs/chemistry/mixture", json={"items": [{"id": 1, "volume": 0}]})
        assert response.status_code == 422


class TestHistoryApi:

    def test_record_and_list_simulation_snapshot(self, client, fixed_clock, tmp_path):
        response = client.post("/api/labs/physics/history",
                               json={"simulationId": "sim03", "variables": {"v": 10}, "score": 70})
        assert response.status_code == 201
        assert response.json() == {
            "experimentType": "sim:sim03",
            "data": {"vars": {"m": 10.0, "v": 10.0}, "outputs": {"KE": 500.0}},
            "timestamp": int(fixed_clock() * 1000),
            "score": 70,
        }
        body = client.get("/api/labs/physics/history").json()
        assert body["count"] == 1
        assert body["records"][0]["experimentType"] == "sim:sim03"
        assert (tmp_path / "physics_experiments.json").is_file()

    def test_most_recent_first(self, client):
        client.post("/api/labs/biology/history", json={"simulationId": "bio01"})
        client.post("/api/labs/biology/history", json={"simulationId": "bio07"})
        records = client.get("/api/labs/biology/history").json()["records"]
        assert [r["experimentType"] for r in records] == ["sim:bio07", "sim:bio01"]

    def test_capacity(self, make_client):
        with make_client(history_capacity=2) as test_client:
            for sim_id in ("sim01", "sim02", "sim03"):
                test_client.post("/api/labs/physics/history", json={"simulationId": sim_id})
            records = test_client.get("/api/labs/physics/history").json()["records"]
        assert [r["experimentType"] for r in records] == ["sim:sim03", "sim:sim02"]

    def test_chemistry_record(self, client):
        response = client.post("/api/labs/chemistry/history", json={
            "chemicals": ["Hydrochloric Acid", "Sodium Hydroxide"],
            "temperature": 25,
            "ph": 7,
            "result": "Salt and water",
            "score": 100,
        })
        assert response.status_code == 201
        assert response.json()["chemicals"] == ["Hydrochloric Acid", "Sodium Hydroxide"]
        assert client.get("/api/labs/chemistry/history").json()["count"] == 1

    def test_invalid_record(self, client):
        response = client.post("/api/labs/chemistry/history", json={"chemicals": "Water"})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid history record"

    def test_unknown_simulation_in_record(self, client):
        response = client.post("/api/labs/physics/history", json={"simulationId": "bio01"})
        assert response.status_code == 404

    def test_unknown_variable_in_record(self, client):
        response = client.post("/api/labs/physics/history",
                               json={"simulationId": "sim03", "variables": {"speed": 1}})
        assert response.status_code == 422
        assert response.json()["key"] == "speed"

    def test_clear(self, client):
        client.post("/api/labs/physics/history", json={"simulationId": "sim03"})
        assert client.delete("/api/labs/physics/history").json() == {"lab": "physics", "count": 0}
        assert client.get("/api/labs/physics/history").json()["count"] == 0

    def test_unknown_lab(self, client):
        response = client.get("/api/labs/astronomy/history")
        assert response.status_code == 404
        assert response.json() == {"error": "Unknown lab 'astronomy'", "lab": "astronomy"}

    def test_history_survives_restart(self, make_client):
        with make_client() as first:
            first.post("/api/labs/physics/history", json={"simulationId": "sim03"})
        with make_client() as second:
            assert second.get("/api/labs/physics/history").json()["count"] == 1
