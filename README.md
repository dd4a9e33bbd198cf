# mvstools

Building blocks for serving an MVS-style dataset catalog: sequential
datasets (PS) are shown as files, partitioned datasets (PO) as directories
whose entries are their members. The package contains the catalog itself,
helpers for the FTP control protocol, a one-shot SMTP mailer and two small
helpers for web applications.

No third-party libraries are needed.

## Command

### `mvs-sendmail`

Sends one HTML e-mail described by a deck of 80-column records, read from
the file named on the command line or, without an argument, from standard
input:

    192.0.2.10:25
    sender@example.com
    recipient@example.com
    This is a test
    Testing 1... 2... 3...

The first four records are the SMTP server (`host[:port]`, port 25 by
default), the sender, the recipient and the subject; every remaining
record is a line of the body. Trailing blanks are trimmed from each
record.

    mvs-sendmail job.txt

The exit status is 0 on success, 1 when the deck is missing or short,
and otherwise the error code of the failure: -1 for bad parameters or an
unknown host, -2 for an unexpected server reply, -3 for a rejected sender
and -4 for a rejected recipient.

## Library use

### Mail (`mvstools.mailer`)

```python
from mvstools.mailer import build_message, read_sysin, send_mail

text = build_message("sender@example.com", "recipient@example.com",
                     "Hello", "Testing 1... 2... 3...\r\n")
send_mail("192.0.2.10:25", "sender@example.com", "recipient@example.com",
          "Hello", "Testing 1... 2... 3...\r\n")
```

`read_sysin` turns a stream of 80-column records into a `MailJob`.
`send_mail` raises `SmtpError` (with a `code` attribute holding the values
listed above) when the server answers with an unexpected reply.

### Dataset catalog (`mvstools.catalog`)

* `read_vtoc(stream)` yields a `Dataset` (name, date in seconds since
  1970, `Org.PS` or `Org.PO`) for every format-1 DSCB of a sequential or
  partitioned dataset; `parse_dscb` decodes a single 96-byte record and
  `leap_days` gives the days from 1970 to the start of a year.
* `parse_pds_directory(stream)` returns the member names held in a
  partitioned dataset's directory blocks (at most 3000).
* `Catalog(loader)` caches the datasets returned by `loader`;
  `refresh()` reloads them (keeping the old list on an I/O error),
  `find(name)` and `org_of(name)` look a dataset up without regard to case.
* `DirectoryStore(root)` keeps datasets in a directory: plain files are
  sequential datasets, sub-directories partitioned ones. It offers
  `datasets()`, `members(name)` and `open(name, member, mode)`.

```python
from mvstools.catalog import Catalog, DirectoryStore

store = DirectoryStore("/srv/datasets")
catalog = Catalog(store.datasets)
catalog.refresh()
catalog.org_of("SYS1.MACLIB")
```

### FTP protocol helpers (`mvstools.ftputil`)

```python
from mvstools.ftputil import canonical_path, dir_concat, server_message

canonical_path("/a//b/../c")                 # "/a/c/"
dir_concat("/SYS1.MACLIB/", "..")            # "/"
server_message(230, "You are now logged in.")  # "230 You are now logged in.\r\n"
```

Also available: `LineBuffer` (collects control-connection text and yields
complete lines), `parse_command`, `parse_host_port` / `format_host_port`
for PORT arguments and PASV replies, and `format_listing_line` /
`format_listing` for `ls -l` style directory listings.

### Collections (`mvstools.collection`)

`Collection` is an ordered collection addressed both by string keys and
by 1-based positions; adding a second item under an existing key turns
that entry into a nested collection:

```python
from mvstools.collection import Collection

c = Collection(raise_errors=True)
c.add("red", key="colour")
c.item("colour")     # "red"
c.item("1")          # "red"
len(c)               # 1
```

With `raise_errors=False` (the default) failed look-ups return `None`
instead of raising `CollectionError`.

### Application state (`mvstools.application`)

`Application` holds shared `contents` and `static_objects` collections
and a re-entrant lock taken with `lock()` / `unlock()` or by using the
object as a context manager. `ObjectContext` records whether a
transaction ended with `set_complete()` or `set_abort()` in its `outcome`
attribute.

## What is not included

The package does not run an FTP server and has no client for sending
service commands to one: it provides the catalog, path handling, reply
formatting and listing pieces such a server is built from, but no
listening socket, session handling or data-connection transfers.

## Tests

    pip install .[test]
    pytest