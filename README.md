# relaychat

A small chat system over plain TCP. A server accepts any number of clients
and passes on whatever one client sends to all the other connected clients.
A terminal client lets you pick a name, type lines and see what others write.

No third-party libraries are needed.

## Installing

```
pip install .
```

## Running the server

```
relaychat-server <port>
```

The server listens on all interfaces (`0.0.0.0`) on the given port, with a
listen backlog of 5. It prints `Connected: <ip>` when a client joins and
`Disconnected from <ip>` when one leaves. Data received from a client is cut
at its first NUL byte and sent unchanged to every other client. If the port
cannot be bound the error is printed and the command exits with status 1.
Stop it with Ctrl-C.

## Running a client

```
relaychat-client <port> <ip>
```

`<ip>` must be an IPv4 address; anything else fails with `Error! Wrong IP`.
If the server cannot be reached the client prints
`Error, can't connect to the server` and exits with status 1.

Once connected the client asks `What do you want to be called: ` and then
reads lines from the keyboard. The name is cut to 32 bytes. Each line you
type is redrawn as `<name>: <text>` and sent to the server, which passes it
on to every other client. Messages from others appear as
`<their name>: <text>`.

Type `EXIT` on a line of its own to leave. The client also stops at the end
of its input or when the server closes the connection.

## Wire format

Each message travels as `username|message`, encoded as UTF-8. The client pads
every frame it sends with NUL bytes to 288 bytes. On decoding, reading stops
at the first NUL byte, empty fields are skipped and fields after the second
are ignored. The name is limited to 32 bytes and the text to 256 bytes. A
missing name becomes `Unknown` and missing text becomes `Null`; a message
whose text is `Null` is not shown by the client.

## Using it from Python

- `relaychat.message.serialize(username, message)` builds the wire form as
  bytes, and `relaychat.message.deserialize(data)` turns bytes or a string
  back into a `ChatMessage` with `username` and `message` fields.
- `relaychat.server.ChatServer(host, port, out)` binds and listens at once
  and writes its connect and disconnect lines to `out` (standard output by
  default). `address` gives the bound address. `poll(timeout)` handles one
  round of activity and returns how many sockets were ready,
  `serve_forever()` runs until `close()` is called, and `close()` shuts every
  connection. It can be used as a context manager.
- `relaychat.client.run_client(host, port, stdin, stdout)` runs a client
  session over the given streams. `parse_input(line)` turns a typed line into
  a `ClientInput` (a message, or the `EXIT` command), and
  `format_incoming(message)` gives the display line for a received
  `ChatMessage`, or `None` when there is nothing to show.

## What it does not do

There is no message history or storage, no private messages, no user list
and no command other than `EXIT`. The server does not greet clients or tell
anyone when others join or leave, and nothing is encrypted.

## Running the tests

```
pip install .[test]
pytest
```