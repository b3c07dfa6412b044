"""
Parser combinators whose parses can be fed their input in chunks.

See the objects for more explanations.

See the `chunkparse.general` module for general purpose parsers you can use as examples.

Defining parsers:
```
ab = either(general.character("a"), general.character("b"))
word = then(eager(many(ab)), eof)
```

Using parsers:
```
run(word, "abba")               # ['a', 'b', 'b', 'a']

s = parse(word)
s = provide(s, "ab")            # suspended, waiting for more input
s1 = provide(s, "ba")           # `s` stays usable
s2 = provide(s, "a")
finish(s1)                      # ['a', 'b', 'b', 'a']
finish(s2)                      # ['a', 'b', 'a']
```

Failures are raised from `finish()` and `run()` as `ParseError`s (usually `ExpectError`s).
"""

import chunkparse.const as const
import chunkparse.main
from chunkparse.main import (
    ParseError,
    ExpectError,
    END,
    Matched,
    Failed,
    NeedsMore,
    Stream,
    InputBuffer,
    Parser,
    Session,
    token,
    always,
    fail,
    get_position,
    eof,
    bind,
    next_,
    then,
    map_value,
    choice,
    either,
    attempt,
    sequence,
    enumeration,
    many,
    many1,
    eager,
    optional,
    between,
    sep_by,
    lookahead,
    not_followed_by,
    expected,
    late,
    parse,
    provide,
    finish,
    run,
)
import chunkparse.general as general
