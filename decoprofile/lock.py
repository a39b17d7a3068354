#
# DecoProfile - dive profile analysis library.
#
# Copyright (C) 2013-2014 by Artur Wroblewski <wrobell@pld-linux.org>
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
#


"""
Lock of the shared decompression model.

The decompression model state can be shared by profile analysis and other
users of the library, i.e. a dive planner. The access to the model is
serialized with :py:class:`PlannerLock` capability, which is passed to
decompression engine.

The lock is *not* reentrant. Acquiring the lock twice by the same caller
blocks forever, so callers have to avoid nested acquisition by
construction. Non-blocking acquisition of the lock held by another user
raises :py:exc:`decoprofile.error.EngineError`.
"""

import threading
import logging

from .error import EngineError

logger = logging.getLogger(__name__)


class PlannerLock(object):
    """
    Non-reentrant lock of the shared decompression model.
    """
    def __init__(self):
        self._lock = threading.Lock()


    def acquire(self, blocking=True):
        """
        Acquire exclusive access to the shared decompression model.

        :param blocking: Wait for the lock if true.
        """
        if not self._lock.acquire(blocking):
            raise EngineError('Decompression model is in use')
        if __debug__:
            logger.debug('decompression model lock acquired')


    def release(self):
        """
        Release access to the shared decompression model.
        """
        if not self._lock.locked():
            raise EngineError('Decompression model lock is not acquired')
        self._lock.release()
        if __debug__:
            logger.debug('decompression model lock released')


    def locked(self):
        """
        Check if the lock is held.
        """
        return self._lock.locked()


    def __enter__(self):
        self.acquire()
        return self


    def __exit__(self, *args):
        self.release()


PLANNER_LOCK = PlannerLock()

# vim: sw=4:et:ai
