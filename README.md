# nodelistdb

A library for reading FidoNet nodelists from every era, from the colon-style
flags of 1986 to the internet flags of today, and turning each entry into a
structured `Node` record.

## What it does

- `nodelistdb.parser.NodelistParser` reads a nodelist file. It takes the
  nodelist date and day number from a `;A` or `;S` header line (or from the
  file name if no header gives one), reads a CRC from the header, and works
  out each node's zone, net and node number from the Zone, Region and Host
  lines above it. Reading stops at a `^Z` end-of-file marker; lines that
  cannot be parsed are skipped.
- Nodes that appear more than once in the same file are all kept: later
  copies get an increasing `conflict_sequence`, and every copy has
  `has_conflict` set.
- `nodelistdb.flagparse` sorts a node's flags into plain, modem and internet
  flags, collects hostnames, ports and e-mail addresses, and builds an
  internet configuration as compact JSON text (`parse_flags_with_config`,
  `parse_advanced_flags`, `parse_protocol_value`, `convert_legacy_flags`).
- `nodelistdb.flags.get_flag_descriptions` documents the known flags with a
  category and a description.
- `nodelistdb.discovery.find_nodelist_files` finds files whose names start
  with `nodelist` (any case), optionally in subdirectories, and
  `parse_conflict_key` reads the address and date out of a duplicate-key
  error message.
- `nodelistdb.database.Database` opens a SQLite database (optionally
  read-only) and creates the `nodes` table and its indexes.
- `nodelistdb.models` and `nodelistdb.analytics` hold the record types for
  nodes, search filters, statistics, changes and analytical reports;
  `analytics.to_dict` turns a report into JSON-ready data.

## Usage

Parse a nodelist file:

```python
from nodelistdb.parser import NodelistParser

parser = NodelistParser(verbose=False)
for node in parser.parse_file("nodelists/1995/NODELIST.365"):
    print(node.address, node.to_dict())
```

`parse_file_with_crc` returns a `ParseResult` that also holds
`nodelist_date`, `day_number` and `file_crc`. Parse errors are raised as
`nodelistdb.parser.ParseError`.

Find every nodelist in a directory tree:

```python
from nodelistdb.discovery import find_nodelist_files

files = find_nodelist_files("nodelists", recursive=True)
```

Look up what a flag means:

```python
from nodelistdb.flags import get_flag_descriptions

info = get_flag_descriptions()["IBN"]
print(info.category, info.description)
```

Parse a flag field by itself:

```python
from nodelistdb.flagparse import parse_flags_with_config

parsed = parse_flags_with_config("CM,XA,IBN:bbs.example.com,ITN")
print(parsed.flags, parsed.internet_protocols, parsed.internet_config)
```

Set up a database:

```python
from nodelistdb.database import Database

with Database("nodelist.db", read_only=False) as db:
    db.create_schema()
    print(db.get_version())
```

## What it does not do

This package is a library only. It has no command-line program, no web
interface and no HTTP API. `Database` creates the schema but offers no
functions for inserting parsed nodes, checking whether a nodelist date was
already imported, or querying nodes, statistics or history; that storage
layer is left to the caller, through `Database.connection`.

## Tests

The tests use pytest and are installed with the `test` extra.