from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class UserRegistrationSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password2 = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'email', 'username', 'password', 'password2',
            'first_name', 'last_name', 'role', 'github_username', 'timezone'
        )
        read_only_fields = ('id',)
        extra_kwargs = {'username': {'required': True}}

    def validate_role(self, value):
        # Superadmins are only created from the command line
        if value == User.Role.SUPERADMIN:
            raise serializers.ValidationError("This role cannot be self-assigned.")
        return value

    def validate(self, attrs):
        if attrs['password'] != attrs.pop('password2'):
            raise serializers.ValidationError({"password": "Password fields didn't match."})
        return attrs

    def create(self, validated_data):
        return User.objects.create_user(**validated_data)


class UserDetailsSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user, as the dashboard header shows it."""
    name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'email', 'username', 'name', 'first_name', 'last_name',
            'role', 'github_username', 'timezone'
        )
        read_only_fields = fields


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Email/password login. The access token carries the role and display
    name so the client can route managers and developers without another
    round trip.
    """
    username_field = User.USERNAME_FIELD

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.display_name
        token['role'] = user.role
        return token
