#!/usr/bin/python3
#
# This file is part of minplus
# Copyright (c) 2021-2022 Ludovic Thomas (ISAE-SUPAERO)
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, version 3.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""
This module contains the fork-join helpers used for the data-parallel parts of the algebra.

The work is split in chunks, each chunk is processed by a ProcessAChunk thread, and the results
are only combined once all the threads have been joined. Curves and elements are immutable, so the
threads never share mutable state.
"""

import functools
import logging
import threading
from typing import Any, Callable, List, Optional, Sequence

logger = logging.getLogger("PAR")


class ProcessAChunk(threading.Thread):
    """
    This class is used to apply a function to a chunk of items.
    As a sub-class of Thread, we can spawn it, resulting in several chunks computed at the same time

    Inheritance:
        threading.Thread:

    """
    _function: Callable[[Any], Any]     #The function applied to each item
    _items: Sequence[Any]               #The chunk of items
    results: List[Any]                  #The results, in the order of the items
    error: Optional[BaseException]      #The exception raised while processing the chunk, if any

    def __init__(self, function: Callable[[Any], Any], items: Sequence[Any], index: int) -> None:
        self._function = function
        self._items = items
        self.results = list()
        self.error = None
        super().__init__(name="Chunk_%d" % index)

    def run(self) -> None:
        try:
            self.results = [self._function(item) for item in self._items]
        except Exception as e:
            #re-raised by the caller after the join
            self.error = e


def split_in_chunks(items: Sequence[Any], count: int) -> List[Sequence[Any]]:
    """Splits items in at most count contiguous chunks of similar sizes"""
    count = max(1, min(count, len(items)))
    size, remainder = divmod(len(items), count)
    chunks = list()
    start = 0
    for i in range(count):
        end = start + size + (1 if i < remainder else 0)
        chunks.append(items[start:end])
        start = end
    return chunks


def fork_join_map(function: Callable[[Any], Any], items: Sequence[Any], workers: int, doMultithread: bool = True) -> List[Any]:
    """
    Applies function to every item, possibly using several threads.

    Args:
        function (Callable): the function to apply
        items (Sequence): the items
        workers (int): number of threads
        doMultithread (bool, optional): if False, the chunks are processed in the calling thread. Defaults to True.

    Returns:
        List: the results, in the order of the items
    """
    items = list(items)
    if(not items):
        return list()
    runningThreads = list()
    for index, chunk in enumerate(split_in_chunks(items, workers if doMultithread else 1)):
        newTh = ProcessAChunk(function, chunk, index)
        if(doMultithread):
            newTh.start()
        else:
            newTh.run()
        runningThreads.append(newTh)
    results = list()
    for th in runningThreads:
        if(doMultithread):
            th.join()
    for th in runningThreads:
        if(th.error is not None):
            raise th.error
        results.extend(th.results)
    logger.debug("Fork-join of %d items on %d chunks" % (len(items), len(runningThreads)))
    return results


def fork_join_reduce(function: Callable[[Any, Any], Any], items: Sequence[Any], workers: int, doMultithread: bool = True) -> Any:
    """
    Folds the items with an associative and commutative function, each thread folding one chunk.

    Raises:
        ValueError: if items is empty
    """
    items = list(items)
    if(not items):
        raise ValueError("Cannot fold an empty list")
    if(len(items) == 1):
        return items[0]
    chunks = split_in_chunks(items, workers if doMultithread else 1)
    partials = fork_join_map(lambda chunk: functools.reduce(function, chunk), chunks, len(chunks), doMultithread)
    return functools.reduce(function, partials)
