"""
Shared sample data for the test suite.
"""

import json
import os


def square(x, y, size=1.0):
    """GeoJSON polygon for an axis-aligned square with its lower-left corner at (x, y)."""
    return {
        'type': 'Polygon',
        'coordinates': [[
            [x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]
        ]]
    }


def feature(properties, geometry=None):
    return {'type': 'Feature', 'properties': properties, 'geometry': geometry}


def collection(features):
    return {'type': 'FeatureCollection', 'features': list(features)}


def kano_states():
    return collection([
        feature({'statename': 'Kano'}, square(0, 0, 4)),
    ])


def kano_lgas():
    return collection([
        feature({'statename': 'Kano', 'lganame': 'Kano Municipal', 'lgacode': '20001'}, square(0, 0)),
        feature({'statename': 'Kano', 'lganame': 'Fagge', 'lgacode': '20002'}, square(1, 0)),
    ])


def kano_wards():
    return collection([
        feature({'lganame': 'Fagge', 'lgacode': '20002', 'wardname': 'Fagge A', 'wardcode': 'W01'},
                square(1, 0, 0.5)),
        feature({'lganame': 'Fagge', 'lgacode': '20002', 'wardname': 'Fagge B', 'wardcode': 'W02'},
                square(1.5, 0, 0.5)),
    ])


def kano_districts():
    return [
        {'Senatorial_District': 'Kano Central', 'LGAs': 'Kano-Municipal'},
        {'Senatorial_District': 'Kano Central', 'LGAs': 'FAGGE'},
    ]


def write_json(directory, name, data):
    path = os.path.join(directory, name)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f)
    return path


def write_kano_inputs(directory):
    """Write the Kano sample inputs; returns (states, lgas, wards, districts) paths."""
    return (
        write_json(directory, 'states.geojson', kano_states()),
        write_json(directory, 'lgas.geojson', kano_lgas()),
        write_json(directory, 'wards.geojson', kano_wards()),
        write_json(directory, 'districts.json', kano_districts()),
    )
