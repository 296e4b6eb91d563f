# tests/test_jsonUtility.py
"""
Tests of the JSON serialization of elements, sequences and curves.
"""

import json
from fractions import Fraction

import pytest

from minplus import jsonUtility
from minplus.curves import Curve
from minplus.elements import Point, Segment
from minplus.rationalUtility import PLUS_INFINITY
from minplus.sequences import Sequence
from minplus.serviceCurves import RateLatencyServiceCurve, SigmaRhoArrivalCurve, BoundedDelayServiceCurve, StairCurve


class TestToDict:

    def test_rationals_are_strings(self):
        data = jsonUtility.to_dict(Segment(0, Fraction(1, 2), PLUS_INFINITY, 0))
        assert data == {"type": "segment", "startTime": "0", "endTime": "1/2", "rightLimitAtStartTime": "+Infinity", "slope": "0"}

    def test_closed_forms_keep_their_parameters(self):
        assert jsonUtility.to_dict(RateLatencyServiceCurve(3, Fraction(5, 2))) == {"type": "rateLatencyServiceCurve", "rate": "3", "latency": "5/2"}
        assert jsonUtility.to_dict(BoundedDelayServiceCurve(4)) == {"type": "delayServiceCurve", "delay": "4"}

    def test_generic_curve(self, left_continuous_curve):
        data = jsonUtility.to_dict(left_continuous_curve)
        assert data["type"] == "curve"
        assert data["periodStart"] == "1"
        assert data["periodLength"] == "2"
        assert len(data["baseSequence"]["elements"]) == 4
        assert "name" not in data

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            jsonUtility.to_dict(3)


class TestFromDict:

    def test_curves_survive(self, continuous_curve, sigma_rho, stair):
        for curve in [continuous_curve, sigma_rho, stair, BoundedDelayServiceCurve(2)]:
            loaded = jsonUtility.loads(jsonUtility.dumps(curve))
            assert type(loaded) is type(curve)
            assert loaded.equivalent(curve)

    def test_name_survives(self):
        curve = Curve([Point(0, 0), Segment(0, 1, 0, 1)], 0, 1, 1, name="flow")
        assert jsonUtility.loads(jsonUtility.dumps(curve)).get_name() == "flow"

    def test_sequence(self):
        sequence = Sequence([Point(0, 0), Segment(0, 1, 0, Fraction(1, 3))])
        assert jsonUtility.loads(jsonUtility.dumps(sequence)) == sequence

    def test_missing_field(self):
        with pytest.raises(AttributeError):
            jsonUtility.from_dict({"type": "sigmaRhoArrivalCurve", "sigma": "3"})

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            jsonUtility.from_dict({"type": "mystery"})

    def test_element_list_as_base_sequence(self):
        data = {"baseSequence": [{"type": "point", "time": "0", "value": "0"},
            {"type": "segment", "startTime": "0", "endTime": "1", "rightLimitAtStartTime": "0", "slope": "2"}],
            "periodStart": "0", "periodLength": "1", "periodHeight": "2"}
        curve = jsonUtility.curve_from_dict(data)
        assert curve.value_at(3) == 6


class TestFiles:

    def test_dump_and_read(self, tmp_path, stair):
        ofile = tmp_path / "stair.json"
        jsonUtility.dump_json(stair, str(ofile))
        with open(ofile, 'r') as f:
            assert json.load(f) == {"type": "stairCurve", "a": "2", "b": "3"}
        assert jsonUtility.read_json(str(ofile)).equivalent(StairCurve(2, 3))

    def test_read_generic_curve(self, tmp_path):
        curve = SigmaRhoArrivalCurve(100, 5).minimum(RateLatencyServiceCurve(20, 10))
        ofile = tmp_path / "minimum.json"
        jsonUtility.dump_json(curve, str(ofile))
        assert jsonUtility.read_json(str(ofile)).equivalent(curve)
