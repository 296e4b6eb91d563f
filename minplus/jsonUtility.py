#!/usr/bin/python3
#
# This file is part of minplus
# Copyright (c) 2023-2024 the minplus authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, version 3.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""
This module contains the JSON serialization of elements, sequences and curves.

Every object is a dictionary tagged with a "type" entry. Rationals are written as strings
("3/4", "5", "+Infinity", "-Infinity") so that no precision is lost. The closed-form curves
are written with their parameters only.
"""

import json
from typing import Union

from minplus import rationalUtility as ru
from minplus.elements import Element, Point, Segment
from minplus.sequences import Sequence
from minplus.curves import Curve
from minplus.serviceCurves import (RateLatencyServiceCurve, SigmaRhoArrivalCurve, ConstantCurve,
    BoundedDelayServiceCurve, StepCurve, StairCurve, TwoRatesServiceCurve)

# Fields each tagged object must define
_mandatory_entries = {
    "point": ["time", "value"],
    "segment": ["startTime", "endTime", "rightLimitAtStartTime", "slope"],
    "sequence": ["elements"],
    "curve": ["baseSequence", "periodStart", "periodLength", "periodHeight"],
    "rateLatencyServiceCurve": ["rate", "latency"],
    "sigmaRhoArrivalCurve": ["sigma", "rho"],
    "constantCurve": ["value"],
    "delayServiceCurve": ["delay"],
    "stepCurve": ["value", "stepTime"],
    "stairCurve": ["a", "b"],
    "twoRatesServiceCurve": ["delay", "transientRate", "transientEnd", "steadyRate"],
}


def _r(value) -> str:
    return ru.to_string(value)


#TO DICTIONARIES

def element_to_dict(element: Element) -> dict:
    if(isinstance(element, Point)):
        return {"type": "point", "time": _r(element.time), "value": _r(element.value)}
    return {
        "type": "segment",
        "startTime": _r(element.start_time),
        "endTime": _r(element.end_time),
        "rightLimitAtStartTime": _r(element.right_limit_at_start_time),
        "slope": _r(element.slope)
    }


def sequence_to_dict(sequence: Sequence) -> dict:
    return {"type": "sequence", "elements": [element_to_dict(e) for e in sequence]}


def curve_to_dict(curve: Curve) -> dict:
    """
    Dictionary of a curve, ready for json.dump. The closed-form curves only keep their parameters.
    """
    if(isinstance(curve, RateLatencyServiceCurve)):
        return {"type": "rateLatencyServiceCurve", "rate": _r(curve.get_rate()), "latency": _r(curve.get_latency())}
    if(isinstance(curve, SigmaRhoArrivalCurve)):
        return {"type": "sigmaRhoArrivalCurve", "sigma": _r(curve.get_sigma()), "rho": _r(curve.get_rho())}
    if(isinstance(curve, ConstantCurve)):
        return {"type": "constantCurve", "value": _r(curve.get_value())}
    if(isinstance(curve, BoundedDelayServiceCurve)):
        return {"type": "delayServiceCurve", "delay": _r(curve.get_delay())}
    if(isinstance(curve, StepCurve)):
        return {"type": "stepCurve", "value": _r(curve.get_value()), "stepTime": _r(curve.get_step_time())}
    if(isinstance(curve, StairCurve)):
        return {"type": "stairCurve", "a": _r(curve.get_a()), "b": _r(curve.get_b())}
    if(isinstance(curve, TwoRatesServiceCurve)):
        return {
            "type": "twoRatesServiceCurve",
            "delay": _r(curve.get_delay()),
            "transientRate": _r(curve.get_transient_rate()),
            "transientEnd": _r(curve.get_transient_end()),
            "steadyRate": _r(curve.get_steady_rate())
        }
    out_dict = {
        "type": "curve",
        "baseSequence": {"elements": [element_to_dict(e) for e in curve.base_sequence]},
        "periodStart": _r(curve.pseudo_period_start),
        "periodLength": _r(curve.pseudo_period_length),
        "periodHeight": _r(curve.pseudo_period_height)
    }
    if(curve.get_name()):
        out_dict["name"] = curve.get_name()
    return out_dict


def to_dict(obj: Union[Element, Sequence, Curve]) -> dict:
    if(isinstance(obj, Curve)):
        return curve_to_dict(obj)
    if(isinstance(obj, Sequence)):
        return sequence_to_dict(obj)
    if(isinstance(obj, Element)):
        return element_to_dict(obj)
    raise TypeError("unsupported type for serialization: %s" % type(obj).__name__)


#FROM DICTIONARIES

def _assert_mandatory_fields(data: dict, kind: str) -> None:
    for field in _mandatory_entries[kind]:
        if field not in data:
            raise AttributeError("No \"{missing}\" entry is defined in {dt}\n A \"{kind}\" object must have the entries {must_have}"
                .format(missing=field, dt=data, kind=kind, must_have=_mandatory_entries[kind]))


def element_from_dict(data: dict) -> Element:
    kind = data.get("type")
    if(kind == "point"):
        _assert_mandatory_fields(data, kind)
        return Point(data["time"], data["value"])
    if(kind == "segment"):
        _assert_mandatory_fields(data, kind)
        return Segment(data["startTime"], data["endTime"], data["rightLimitAtStartTime"], data["slope"])
    raise ValueError("Unknown element type %r" % kind)


def sequence_from_dict(data: dict) -> Sequence:
    _assert_mandatory_fields(data, "sequence")
    return Sequence([element_from_dict(e) for e in data["elements"]])


def curve_from_dict(data: dict) -> Curve:
    """
    Curve described by a dictionary loaded from json

    Raises:
        AttributeError: if a mandatory entry is missing
        ValueError: if the type is unknown or a value cannot be parsed
    """
    kind = data.get("type", "curve")
    if(kind not in _mandatory_entries or kind in ("point", "segment", "sequence")):
        raise ValueError("Unknown curve type %r" % kind)
    _assert_mandatory_fields(data, kind)
    if(kind == "rateLatencyServiceCurve"):
        return RateLatencyServiceCurve(data["rate"], data["latency"])
    if(kind == "sigmaRhoArrivalCurve"):
        return SigmaRhoArrivalCurve(data["sigma"], data["rho"])
    if(kind == "constantCurve"):
        return ConstantCurve(data["value"])
    if(kind == "delayServiceCurve"):
        return BoundedDelayServiceCurve(data["delay"])
    if(kind == "stepCurve"):
        return StepCurve(data["value"], data["stepTime"])
    if(kind == "stairCurve"):
        return StairCurve(data["a"], data["b"])
    if(kind == "twoRatesServiceCurve"):
        return TwoRatesServiceCurve(data["delay"], data["transientRate"], data["transientEnd"], data["steadyRate"])
    base_sequence = data["baseSequence"]
    if(isinstance(base_sequence, dict)):
        base_sequence = sequence_from_dict(base_sequence)
    else:
        base_sequence = Sequence([element_from_dict(e) for e in base_sequence])
    return Curve(base_sequence, data["periodStart"], data["periodLength"], data["periodHeight"], name=data.get("name", ""))


def from_dict(data: dict) -> Union[Element, Sequence, Curve]:
    kind = data.get("type")
    if(kind in ("point", "segment")):
        return element_from_dict(data)
    if(kind == "sequence"):
        return sequence_from_dict(data)
    return curve_from_dict(data)


#STRINGS AND FILES

def dumps(obj: Union[Element, Sequence, Curve], **kargs) -> str:
    return json.dumps(to_dict(obj), **kargs)


def loads(s: str) -> Union[Element, Sequence, Curve]:
    return from_dict(json.loads(s))


def dump_json(obj: Union[Element, Sequence, Curve], ofile: str) -> None:
    '''
    Dump an element, a sequence or a curve into a json file
    '''
    with open(ofile, 'w') as f:
        json.dump(to_dict(obj), f, indent=4)


def read_json(ifpath: str) -> Union[Element, Sequence, Curve]:
    '''
    Read an element, a sequence or a curve from a json file
    '''
    with open(ifpath, 'r') as ifile:
        data = json.load(ifile)
    return from_dict(data)
