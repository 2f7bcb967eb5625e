# --- tests/test_chemistry.py ---
import pytest

from vlab_core import ConfigurationError
from vlab_core.chemistry import (
    Chemical, ChemistryExperiment, Mixture, ReactionContext,
    build_analysis_request, demo_properties, load_chemical_catalog,
)
from vlab_core.chemistry.mixture import js_number


def _chemical(chemical_id: int, ph: float, concentration: float = 1.0, name: str = None) -> Chemical:
    return Chemical(id=chemical_id, name=name or f"Chem{chemical_id}", formula=f"X{chemical_id}",
                    description="", ph=ph, concentration=concentration)


class TestChemicalCatalog:

    def test_packaged_shelf(self, chemical_catalog):
        assert len(chemical_catalog) == 30
        water = chemical_catalog.get(1)
        assert (water.name, water.formula) == ("Water", "H2O")
        assert 30 in chemical_catalog
        assert chemical_catalog.get(31) is None

    def test_demo_properties_follow_shelf_position(self, chemical_catalog):
        for index, chemical in enumerate(chemical_catalog):
            assert (chemical.ph, chemical.concentration) == demo_properties(index)
        assert demo_properties(0) == (1.0, 0.1)
        assert demo_properties(14) == (1.0, pytest.approx(0.5))

    def test_search_name_and_formula(self, chemical_catalog):
        assert [c.id for c in chemical_catalog.search("sodium hydrox")] == [4]
        assert [c.name for c in chemical_catalog.search("h2so4")] == ["Sulfuric Acid"]
        assert len(chemical_catalog.search("")) == 30

    def test_known_reaction_in_either_order(self, chemical_catalog):
        forward = chemical_catalog.reaction_for([3, 4])
        backward = chemical_catalog.reaction_for((4, 3))
        assert forward is backward
        assert forward.description == "Neutralization of HCl and NaOH produces water and salt."
        assert forward.products == (1, 2)
        assert forward.is_visible

    def test_unknown_pair_gets_default_reaction(self, chemical_catalog):
        reaction = chemical_catalog.reaction_for([1, 2])
        assert reaction.description == "No visible reaction occurs between these chemicals."
        assert reaction.products == ()
        assert not reaction.is_visible

    def test_broken_catalog_is_a_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_chemical_catalog(tmp_path / "missing.yaml")

    def test_default_catalog_is_cached(self):
        assert load_chemical_catalog() is load_chemical_catalog()


class TestMixture:

    def test_empty_mixture_is_neutral(self):
        assert Mixture().estimate_ph() == 7.0

    def test_acid_lowers_ph(self):
        mixture = Mixture()
        mixture.add(_chemical(1, ph=2.0, concentration=0.5))
        assert mixture.estimate_ph() == pytest.approx(4.5)

    def test_base_raises_ph(self):
        mixture = Mixture()
        mixture.add(_chemical(1, ph=10.0, concentration=1.0))
        assert mixture.estimate_ph() == pytest.approx(10.0)

    def test_balanced_acid_and_base(self):
        mixture = Mixture()
        mixture.add(_chemical(1, ph=4.0))
        mixture.add(_chemical(2, ph=10.0))
        assert mixture.estimate_ph() == 7.0

    def test_result_is_limited_to_ph_scale(self):
        mixture = Mixture()
        for n in range(5):
            mixture.add(_chemical(n, ph=1.0, concentration=1.0))
        assert mixture.estimate_ph() == 1.0

        mixture.clear()
        for n in range(5):
            mixture.add(_chemical(n, ph=14.0, concentration=1.0))
        assert mixture.estimate_ph() == 14.0

    def test_volumes_do_not_weight_the_estimate(self):
        small, large = Mixture(), Mixture()
        small.add(_chemical(1, ph=3.0), volume=1)
        large.add(_chemical(1, ph=3.0), volume=500)
        assert small.estimate_ph() == large.estimate_ph()

    def test_volume_must_be_positive(self):
        with pytest.raises(ValueError):
            Mixture().add(_chemical(1, ph=7.0), volume=0)

    def test_entries_keep_insertion_order(self):
        mixture = Mixture()
        mixture.add(_chemical(4, ph=7.0, name="B"))
        mixture.add(_chemical(2, ph=7.0, name="A"), volume=2.5)
        assert mixture.chemical_ids == (4, 2)
        assert mixture.names == ("B", "A")
        assert [entry.label for entry in mixture.entries] == ["B (10ml)", "A (2.5ml)"]


class TestAnalysisRequest:

    @pytest.fixture
    def mixture(self, chemical_catalog):
        mixture = Mixture()
        mixture.add(chemical_catalog.get(3))
        mixture.add(chemical_catalog.get(4), volume=20)
        return mixture

    def test_js_number(self):
        assert js_number(10.0) == "10"
        assert js_number(2.5) == "2.5"

    def test_request_without_context(self, mixture):
        assert build_analysis_request(mixture) == {
            "reactantNames": ["Hydrochloric Acid (10ml)", "Sodium Hydroxide (20ml)"],
        }

    def test_request_with_context(self, mixture):
        context = ReactionContext(temperature_c=25, heating=False, ph=6.5, notes="stirred",
                                  volumes={"Hydrochloric Acid": 10.0})
        request = build_analysis_request(mixture, context)
        assert request["reactantNames"][-1] == "__CONTEXT__ Temperature=25C; Heating=No; pH=6.50; Notes=stirred"
        assert request["meta"] == {
            "temperatureC": 25, "heating": False, "ph": 6.5, "notes": "stirred",
            "volumes": {"Hydrochloric Acid": 10.0},
        }

    def test_empty_context_adds_no_line(self, mixture):
        request = build_analysis_request(mixture, ReactionContext())
        assert len(request["reactantNames"]) == 2
        assert request["meta"] == {}


class TestChemistryExperiment:

    def test_from_mixture_scores_visible_reactions(self, chemical_catalog, fixed_clock):
        mixture = Mixture()
        mixture.add(chemical_catalog.get(3))
        mixture.add(chemical_catalog.get(4))
        visible = ChemistryExperiment.from_mixture(mixture, 25, "Salt and water", visible=True, clock=fixed_clock)
        hidden = ChemistryExperiment.from_mixture(mixture, 25, "Nothing", visible=False, clock=fixed_clock)
        assert visible.score == 100
        assert hidden.score == 50
        assert visible.chemicals == ("Hydrochloric Acid", "Sodium Hydroxide")
        assert visible.ph == mixture.estimate_ph()

    def test_record_round_trip(self):
        experiment = ChemistryExperiment(chemicals=["Water"], temperature=30.0, ph=7.0,
                                         result="Nothing", timestamp=1.25, score=50)
        record = experiment.to_record()
        assert record == {"chemicals": ["Water"], "temperature": 30.0, "ph": 7.0,
                          "result": "Nothing", "timestamp": 1250, "score": 50}
        assert ChemistryExperiment.from_record(record) == experiment

    @pytest.mark.parametrize("record", [
        {"chemicals": "Water", "temperature": 1, "ph": 7, "result": "", "timestamp": 0, "score": 1},
        {"chemicals": [], "temperature": "hot", "ph": 7, "result": "", "timestamp": 0, "score": 1},
        {"chemicals": []},
    ])
    def test_malformed_records(self, record):
        with pytest.raises(ValueError, match="Malformed chemistry experiment record"):
            ChemistryExperiment.from_record(record)
