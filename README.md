# cellevac

Evacuation coordination for a cell that runs containers on behalf of a
scheduler. All durations are given in seconds. Loggers are standard
`logging.Logger` objects. If you pass `None`, the `cellevac` logger is used.

## What it provides

- `cellevac.context.EvacuationContext` is a one-way flag that records that
  the cell has begun evacuating. `new_context()` returns the same context
  three times, as `(evacuatable, reporter, notifier)`:
  - `evacuate()` sets the flag. Calling it again, even from several threads
    at once, is safe.
  - `evacuating()` reports whether the flag is set.
  - `evacuate_notify()` returns the `threading.Event` behind the flag, so
    you can block on it.
- `cellevac.evacuator.Evacuator` handles evacuation. Its
  `run(stop, ready)` sets `ready` and then waits for one of two events:
  - If `stop` is set first, it returns.
  - If the notifier's event is set first, it polls
    `executor_client.list_containers()` every `polling_interval` seconds.
    It returns once the list is empty, once `stop` is set, or once
    `evacuation_timeout` seconds have passed. A timeout is logged as an
    error, but no exception is raised.

  If listing the containers fails, the failure counts as "not yet
  evacuated" and the poll is tried again.
- `cellevac.cleanup.EvacuationCleanup` runs the shutdown clean-up. Its
  `run(signals, ready)` sets `ready`, then waits for an item on the
  `queue.Queue` `signals`. When one arrives, it does the following:
  1. It fetches the actual LRPs for its cell from the BBS client and
     re-raises any error from that call.
  2. It counts the LRPs whose presence is `Presence.EVACUATING` and sends the
     count as the `StrandedEvacuatingActualLRPs` metric.
  3. For each container, it sends the app log
     `Cell <cell_id> reached evacuation timeout for instance <guid>`. The log
     uses the container's log source name and tags, which include
     `source_id` and `instance_id`.
  4. It deletes every container concurrently, with an empty trace id.
  5. It checks every `check_interval` seconds (default 1.0) until no
     containers remain. A failure to list the containers counts as "none
     left".

  If containers remain after `exit_timeout` seconds, it raises
  `CleanupTimeoutError`. By default `exit_timeout` is the graceful shutdown
  interval plus the proxy reload duration plus five seconds.
  `exit_timeout` and `check_interval` are plain attributes and may be
  changed after construction.

`cellevac.models` holds the data types and the client interfaces:

- Data types: `Container`, `LogConfig` (with `source_name_and_tags()`),
  `ActualLRP`, `Presence` and `ActualLRPFilter`.
- Client interfaces, written as protocols: `ExecutorClient`, `BBSClient`
  and `IngressClient`.

## What it does not do

The package has no command-line entry point and no server. It also has no
working clients for an executor, a BBS or a metrics ingress. You supply
objects that implement the protocols in `cellevac.models`, and you run
`Evacuator.run` and `EvacuationCleanup.run` yourself, for example in
threads.

## Installing

```
pip install .
```

## Example

```python
import threading

from cellevac.context import new_context
from cellevac.evacuator import Evacuator

evacuatable, reporter, notifier = new_context()
stop = threading.Event()
ready = threading.Event()

evacuator = Evacuator(None, executor_client, notifier, "cell-1",
                      evacuation_timeout=180.0, polling_interval=30.0)
worker = threading.Thread(target=evacuator.run, args=(stop, ready))
worker.start()
ready.wait()

evacuatable.evacuate()   # start the evacuation
worker.join()
```

## Running the tests

```
pip install .[test]
pytest
```