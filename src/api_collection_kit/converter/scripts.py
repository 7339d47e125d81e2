"""Rewrite pre-request and test scripts between client scripting dialects.

Only the well-known variable, request, response and assertion helpers are
translated. Anything else is left as written.
"""

import re

_ARG = r"""\(['"]([^'"]+)['"]\)"""
_SET = r"""\(['"]([^'"]+)['"]\s*,\s*([^)]+)\)"""

POSTMAN_TO_INSOMNIA = [
    (rf"pm\.environment\.get{_ARG}", r'insomnia.environment.get("\1")'),
    (rf"pm\.environment\.set{_SET}", r'insomnia.environment.set("\1", \2)'),
    (rf"pm\.environment\.unset{_ARG}", r'insomnia.environment.unset("\1")'),
    (rf"pm\.collectionVariables\.get{_ARG}", r'insomnia.baseEnvironment.get("\1")'),
    (rf"pm\.collectionVariables\.set{_SET}", r'insomnia.baseEnvironment.set("\1", \2)'),
    # Insomnia has no globals
    (rf"pm\.globals\.get{_ARG}", r'insomnia.variables.get("\1")'),
    (rf"pm\.globals\.set{_SET}", r'insomnia.variables.set("\1", \2)'),
    (rf"pm\.variables\.get{_ARG}", r'insomnia.variables.get("\1")'),
    (rf"pm\.variables\.set{_SET}", r'insomnia.variables.set("\1", \2)'),
    (r"pm\.request\.(url|method|headers|body)", r"insomnia.request.\1"),
    (r"pm\.response\.code", "insomnia.response.status"),
    (r"pm\.response\.status\b", "insomnia.response.statusText"),
    (r"pm\.response\.(json|text)\(\)", r"insomnia.response.\1()"),
    (r"pm\.response\.(headers|responseTime)", r"insomnia.response.\1"),
    (r"pm\.(test|expect|sendRequest)\(", r"insomnia.\1("),
]

INSOMNIA_TO_POSTMAN = [
    (rf"insomnia\.environment\.get{_ARG}", r'pm.environment.get("\1")'),
    (rf"insomnia\.environment\.set{_SET}", r'pm.environment.set("\1", \2)'),
    (rf"insomnia\.environment\.unset{_ARG}", r'pm.environment.unset("\1")'),
    (rf"insomnia\.baseEnvironment\.get{_ARG}", r'pm.collectionVariables.get("\1")'),
    (rf"insomnia\.baseEnvironment\.set{_SET}", r'pm.collectionVariables.set("\1", \2)'),
    (rf"insomnia\.variables\.get{_ARG}", r'pm.variables.get("\1")'),
    (rf"insomnia\.variables\.set{_SET}", r'pm.variables.set("\1", \2)'),
    (r"insomnia\.request\.(url|method|headers|body)", r"pm.request.\1"),
    (r"insomnia\.response\.statusText", "pm.response.status"),
    (r"insomnia\.response\.status\b", "pm.response.code"),
    (r"insomnia\.response\.(json|text)\(\)", r"pm.response.\1()"),
    (r"insomnia\.response\.(headers|responseTime)", r"pm.response.\1"),
    (r"insomnia\.(test|expect|sendRequest)\(", r"pm.\1("),
]

POSTMAN_TO_THUNDERCLIENT = [
    (r"pm\.(test|expect)\(", r"tc.\1("),
    (r"pm\.response\.json\(\)", "tc.response.json"),
    (r"pm\.response\.code", "tc.response.status"),
]

THUNDERCLIENT_WARNING = (
    "// Warning: Thunder Client has limited script support\n"
    "// Some features may not work\n"
)

_RULES = {
    ("postman", "insomnia"): POSTMAN_TO_INSOMNIA,
    ("insomnia", "postman"): INSOMNIA_TO_POSTMAN,
    ("postman", "thunderclient"): POSTMAN_TO_THUNDERCLIENT,
}


def _apply(script: str, rules: list[tuple[str, str]]) -> str:
    for pattern, replacement in rules:
        script = re.sub(pattern, replacement, script)
    return script


def translate_script(script: str | None, source: str, target: str) -> str | None:
    """Translate ``script`` from the ``source`` client dialect to ``target``.

    Pairs without a rule set (including same-format conversion) are returned
    unchanged.
    """
    if not script:
        return script
    rules = _RULES.get((source, target))
    if rules is None:
        return script

    converted = _apply(script, rules)
    if target == "thunderclient" and ("pm.sendRequest" in script or "pm.environment" in script):
        converted = THUNDERCLIENT_WARNING + converted
    return converted
