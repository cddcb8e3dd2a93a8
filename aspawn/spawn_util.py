"""helpers shared by the backends

streams are given to a backend either as a mapping {child_fd: stream} or
as a sequence (stdin, stdout, stderr, ...); anything with a fileno()
works as a stream and None means "inherit".

>>> list(get_streams((None, 5, 6)))
[(1, 5), (2, 6)]
>>> list(get_streams({0: 4}, std_names=True))
[('stdin', 4)]
>>> list(get_streams({2: 7}, include_None=True, std_names=True))
[('stdin', None), ('stdout', None), ('stderr', 7)]
>>> redirections({0: 4, 1: 5, 2: 5})
([(4, 0), (5, 1), (5, 2)], [4, 5])
>>> redirections({1: 1})
([], [])
"""

STD_NAMES = 'stdin', 'stdout', 'stderr'


def _fileno(stream):
    return stream if isinstance(stream, int) else stream.fileno()


def get_streams(streams, include_None=False, std_names=False):
    """yield (child_fd, stream) pairs

    include_None: also yield the standard streams that are not given
    std_names:    use 'stdin', 'stdout', 'stderr' in place of 0, 1, 2
    """
    if not isinstance(streams, dict):
        streams = dict(enumerate(streams))
    if include_None:
        streams = {**dict.fromkeys(range(len(STD_NAMES))), **streams}
    for fd in sorted(streams):
        stream = streams[fd]
        if stream is None and not include_None:
            continue
        if std_names and fd < len(STD_NAMES):
            fd = STD_NAMES[fd]
        yield fd, stream


def redirections(streams):
    """plan the dup2()s and close()s a child must do before exec()

    Returns (dups, closes): dups is a list of (parent_fd, child_fd) and
    closes lists parent descriptors to close once
    every dup2() is done. A descriptor that is already in place is left
    alone, and one that is used for several child descriptors is closed
    only once.
    """
    dups = []
    for child_fd, stream in get_streams(streams):
        parent_fd = _fileno(stream)
        if parent_fd != child_fd:
            dups.append((parent_fd, child_fd))
    targets = {child_fd for _, child_fd in dups}
    closes = sorted({parent_fd for parent_fd, _ in dups} - targets)
    return dups, closes
