"""
Central counterparty registry and registration decorator for fair randomness exchanges.
Use @register_agent("name") above your counterparty class to make it available for simulations and tests.
All agent modules must be imported here to ensure registration occurs.
"""

AGENT_MAP = {}

def register_agent(name):
	"""
	Decorator to register a counterparty class under a given name.
	Usage:
		@register_agent("random")
		class RandomCounterparty(Counterparty): ...
	"""
	def decorator(cls):
		AGENT_MAP[name] = cls
		return cls
	return decorator

# Automatically import all agent modules in this directory to ensure registration decorators run
import importlib
import os
import pkgutil

_this_dir = os.path.dirname(__file__)
_pkg_name = __name__
for _, modname, ispkg in pkgutil.iter_modules([_this_dir]):
	if not ispkg and modname not in ("__init__", "base"):
		importlib.import_module(f"{_pkg_name}.{modname}")
