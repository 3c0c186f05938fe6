# accessrules

Building blocks for access control:

- `accessrules.model`: a policy model that holds request, policy, role,
  effect and matcher definitions and the rules that go with them.
- `accessrules.role_manager`: a role manager for role inheritance. It
  supports domains and optional pattern matching.
- `accessrules.file_adapter`: adapters that load policies from
  comma-separated text files and save policies to them.
- `accessrules.persist`: interfaces for storage back ends and for watchers.
- `accessrules.logger`: logging hooks.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Role inheritance

```python
from accessrules.role_manager import DefaultRoleManager

rm = DefaultRoleManager(10)      # maximum depth searched by has_link
rm.add_link("alice", "admin")
rm.add_link("admin", "root")

rm.has_link("alice", "root")     # True
rm.get_roles("alice")            # ["admin"]  (direct roles only)
rm.get_users("admin")            # ["alice"]  (direct users only)
rm.delete_link("admin", "root")
rm.clear()
```

To put a link in a domain, pass the domain as a third argument:

```python
rm.add_link("bob", "editor", "domain1")
rm.has_link("bob", "editor", "domain1")   # True
rm.has_link("bob", "editor", "domain2")   # False
```

Errors are subclasses of `RoleManagerError`:

- Passing more than one domain raises `DomainParameterError`.
- `delete_link` on a name that the manager does not know raises
  `NamesNotFoundError`.
- `get_users` on an unknown name raises `NameNotFoundError`.

`add_matching_func(name, fn)` and `add_domain_matching_func(name, fn)` take a
function of two strings that returns a bool. Once it is set, role names (or
domains) that are stored as patterns are matched with that function instead
of being compared for equality. Only one function of each kind is kept, and
setting a new one replaces the old one. `print_roles` passes the role links
to the manager's logger when that logger is enabled.

`RoleManager` is the abstract interface. Subclass it to supply your own role
manager.

## Models and policies

A `Model` is a dict from section name to key to `Assertion`. The sections are
`r` (request), `p` (policy), `g` (roles), `e` (effect) and `m` (matchers).

```python
from accessrules.logger import DefaultLogger
from accessrules.model import Model

m = Model(DefaultLogger())
m.add_def("r", "r", "sub, obj, act")
m.add_def("p", "p", "sub, obj, act")
m.add_def("e", "e", "some(where (p.eft == allow))")
m.add_def("m", "m", "r.sub == p.sub && r.obj == p.obj && r.act == p.act")

m.add_policy("p", "p", ["alice", "data1", "read"])
m.has_policy("p", "p", ["alice", "data1", "read"])   # True
m.get_filtered_policy("p", "p", 0, "alice")          # [["alice", "data1", "read"]]
m.remove_filtered_policy("p", "p", 1, "data1")       # (True, [["alice", "data1", "read"]])
```

Details:

- `add_def` returns `False` and adds nothing when the value is empty.
- In filters, an empty string matches any value.
- `load_model_from_config` takes a mapping of `"<section name>::<key>"` to
  text, for example `{"request_definition::r": "sub, obj, act", ...}`.
  Numbered keys such as `p2` and `p3` are read until one is missing. The
  method raises `ModelError` and names any required section that is missing.
- Other rule operations: `add_policies`, `add_policies_with_affected`,
  `remove_policy`, `remove_policies`, `remove_policies_with_affected`,
  `update_policy`, `update_policies`, `clear_policy`,
  `get_values_for_field_in_policy` and
  `get_values_for_field_in_policy_all_types`.
- `update_policies` replaces nothing unless every old rule is present.
- When the first token of a policy definition is `priority`, its rules are
  kept ordered by that numeric field. `add_policy` keeps this order, and
  `sort_policies_by_priority` sorts existing rules.
- `build_role_links(rm_map)` and `build_incremental_role_links(rm_map, op, sec, ptype, rules)`
  send grouping rules to role managers keyed by ptype. `op` is
  `PolicyOp.ADD` or `PolicyOp.REMOVE`.

`FunctionMap` is a thread-safe registry of named functions. `add_function`
does not replace a name that is already registered.

## File adapters

`FileAdapter` reads policy files that hold one rule per line:

```
p, alice, data1, read
g, alice, admin
```

Empty lines and lines that start with `#` are skipped.

```python
from accessrules.file_adapter import FileAdapter, FilteredFileAdapter, Filter

adapter = FileAdapter("policy.csv")
adapter.load_policy(m)
adapter.save_policy(m)

filtered = FilteredFileAdapter("policy.csv")
filtered.load_filtered_policy(m, Filter(p=["alice"], g=[]))
filtered.is_filtered()   # True
```

In a `Filter`, an empty value matches anything. Calling
`load_filtered_policy` with a filter of `None` loads every rule.

Any other filter type raises `AdapterError`. `FilteredFileAdapter` counts as
filtered until `load_policy` or `load_filtered_policy(model, None)` has been
called, and `save_policy` raises `AdapterError` while it is filtered.

An empty file path also raises `AdapterError`. The file adapters do not
support auto-save, so `add_policy`, `add_policies`, `remove_policy`,
`remove_policies`, `remove_filtered_policy`, `update_policy` and
`update_policies` all raise `AdapterError`.

## Storage and watcher interfaces

`accessrules.persist` defines these abstract interfaces for your own storage
back ends and for keeping several instances in sync:

- `Adapter`
- `FilteredAdapter`
- `BatchAdapter`
- `UpdatableAdapter`
- `Dispatcher`
- `Watcher`
- `WatcherEx`
- `WatcherUpdatable`

`load_policy_line(line, model)` parses one policy-file line into a model. The
section named by the line must already exist in the model.

## Logging

`DefaultLogger` starts disabled. When enabled, it writes at INFO level to the
standard `logging` logger named `accessrules`. The module-level functions
`log_model`, `log_enforce`, `log_role` and `log_policy` pass their calls to the
logger set with `set_logger`. `get_logger` returns that logger.

```python
import logging
from accessrules.logger import DefaultLogger, set_logger

logging.basicConfig(level=logging.INFO)
logger = DefaultLogger()
logger.enable_log(True)
set_logger(logger)
```

## What this package does not do

- It does not evaluate matcher expressions or make allow/deny decisions.
  There is no enforcer.
- It does not read model `.conf` files. Models are built with `add_def` or
  `load_model_from_config` from a mapping.
- It ships no ready-made match functions such as key or IP matching.
  `FunctionMap` starts empty.
- It has no command-line interface. The only storage provided is the plain
  text file adapter.