class ChainedIterator:
    '''
    Iterate over several iterators one after the other.

    The chain is lazy and single pass: each iterator is only touched when the
    previous ones are exhausted, and iterators that turn out to be empty are
    skipped. Once exhausted, the chain cannot be restarted.
    '''
    _EMPTY = object()

    def __init__(self, *iterators):
        self._iterators = iter([iter(it) for it in iterators])
        self._current = None
        self._next = self._EMPTY

    def __repr__(self):
        return '<ChainedIterator has_next={}>'.format(self.has_next())

    def __iter__(self):
        return self

    def has_next(self):
        ''' Return True if ``next()`` would return an item. '''
        if self._next is self._EMPTY:
            self._next = self._seek()
        return self._next is not self._EMPTY

    def __next__(self):
        if not self.has_next():
            raise StopIteration()
        item, self._next = self._next, self._EMPTY
        return item

    next = __next__

    def _seek(self):
        while True:
            if self._current is not None:
                for item in self._current:
                    return item
            self._current = next(self._iterators, None)
            if self._current is None:
                return self._EMPTY
