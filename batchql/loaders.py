"""Relations of the domain schema, one resolver each."""
from __future__ import annotations

from .models import MemberType, Post, Profile, SubscribersOnAuthors, User
from .relations import RelationDescriptor, RelationResolver

POST_AUTHOR = RelationDescriptor('post.author', User, parent_key='author_id', lookup='id', single=True)
USER_POSTS = RelationDescriptor('user.posts', Post, parent_key='id', lookup='author_id')
USER_PROFILE = RelationDescriptor('user.profile', Profile, parent_key='id', lookup='user_id', single=True)
PROFILE_USER = RelationDescriptor('profile.user', User, parent_key='user_id', lookup='id', single=True)
PROFILE_MEMBER_TYPE = RelationDescriptor(
    'profile.memberType', MemberType, parent_key='member_type_id', lookup='id', single=True,
)
MEMBER_TYPE_PROFILES = RelationDescriptor('memberType.profiles', Profile, parent_key='id', lookup='member_type_id')

# Subscription edge, forward: authors the user follows (rows grouped by subscriber_id).
USER_SUBSCRIBED_TO = RelationDescriptor(
    'user.userSubscribedTo', User, parent_key='id',
    lookup='subscriber_id', through=SubscribersOnAuthors, through_link='author_id',
)
# Reverse: users following the author (rows grouped by author_id).
SUBSCRIBED_TO_USER = RelationDescriptor(
    'user.subscribedToUser', User, parent_key='id',
    lookup='author_id', through=SubscribersOnAuthors, through_link='subscriber_id',
)

post_author = RelationResolver(POST_AUTHOR)
user_posts = RelationResolver(USER_POSTS)
user_profile = RelationResolver(USER_PROFILE)
profile_user = RelationResolver(PROFILE_USER)
profile_member_type = RelationResolver(PROFILE_MEMBER_TYPE)
member_type_profiles = RelationResolver(MEMBER_TYPE_PROFILES)
user_subscribed_to = RelationResolver(USER_SUBSCRIBED_TO)
subscribed_to_user = RelationResolver(SUBSCRIBED_TO_USER)
