# Services package.
#
#   post_service : create / update / delete / get / search for Post
#
# Services never open a session themselves: the repository they are
# given acquires one per call and owns the transaction boundary.
